from types import SimpleNamespace

from phenofarm.services.lab_results import infer_strain_type, resolve_cbd, resolve_strain_name, resolve_thc


def _product(batch=None, strain=None, **legacy):
    values = {"thc_legacy": None, "cbd_legacy": None, "strain_legacy": None}
    values.update(legacy)
    return SimpleNamespace(batch=batch, strain=strain, **values)


def test_legacy_thc_used_when_batch_has_none():
    product = _product(batch=SimpleNamespace(thc=None, cbd=None), thc_legacy=18.5)
    assert resolve_thc(product) == 18.5


def test_batch_thc_wins_over_legacy():
    product = _product(batch=SimpleNamespace(thc=22.0, cbd=0.0), thc_legacy=18.5, cbd_legacy=1.2)
    assert resolve_thc(product) == 22.0
    # Zero is a measured value
    assert resolve_cbd(product) == 0.0


def test_no_values():
    assert resolve_thc(_product()) is None
    assert resolve_strain_name(_product()) is None


def test_strain_name_prefers_relation():
    assert resolve_strain_name(_product(strain=SimpleNamespace(name="Harlequin"), strain_legacy="Old")) == "Harlequin"
    assert resolve_strain_name(_product(strain_legacy="Old")) == "Old"


def test_infer_strain_type():
    assert infer_strain_type("Blue Dream", "Sativa dominant hybrid") == "Sativa"
    assert infer_strain_type("Indica Kush", None) == "Indica"
    assert infer_strain_type("Mystery", "") is None
