# phenofarm/services/favorites.py
from typing import List

from phenofarm.utils.storage import KeyValueStorage, load_json, save_json

FAVORITES_KEY = "phenofarm_favorites"


class FavoritesStore:
    """Favorite product ids of one dispensary user, most recent last."""

    def __init__(self, storage: KeyValueStorage, key: str = FAVORITES_KEY):
        self.storage = storage
        self.key = key

    def ids(self) -> List[str]:
        raw = load_json(self.storage, self.key, [])
        if not isinstance(raw, list):
            return []
        # Ids are kept as strings in storage
        return [str(value) for value in raw if isinstance(value, (str, int))]

    def contains(self, product_id) -> bool:
        return str(product_id) in self.ids()

    def add(self, product_id) -> List[str]:
        ids = self.ids()
        if str(product_id) not in ids:
            ids.append(str(product_id))
            save_json(self.storage, self.key, ids)
        return ids

    def remove(self, product_id) -> List[str]:
        ids = [value for value in self.ids() if value != str(product_id)]
        save_json(self.storage, self.key, ids)
        return ids

    def toggle(self, product_id) -> bool:
        """Returns True when the product is a favorite afterwards."""
        if self.contains(product_id):
            self.remove(product_id)
            return False
        self.add(product_id)
        return True

    def clear(self) -> None:
        save_json(self.storage, self.key, [])
