import json
import logging
from typing import Callable, Dict, List, Mapping, Optional

from ...exceptions import HospitalNotFound

logger = logging.getLogger(__name__)


def _normalize(mapping: Mapping[str, str]) -> Dict[str, str]:
    if not isinstance(mapping, Mapping):
        raise ValueError("Hospital directory must be a JSON object of hospital id -> base URL")
    normalized: Dict[str, str] = {}
    for hospital_id, base_url in mapping.items():
        if not isinstance(base_url, str) or not base_url.startswith(("http://", "https://")):
            raise ValueError(f"Invalid base URL for hospital {hospital_id!r}: {base_url!r}")
        normalized[str(hospital_id)] = base_url.rstrip("/")
    return normalized


class HospitalDirectory:
    """Maps a hospital id to the base URL of that hospital's own backend."""

    def __init__(self, mapping: Mapping[str, str], loader: Optional[Callable[[], Mapping[str, str]]] = None):
        self._urls = _normalize(mapping)
        self._loader = loader

    @classmethod
    def from_settings(cls, settings) -> "HospitalDirectory":
        if settings.HOSPITALS_FILE:
            path = settings.HOSPITALS_FILE

            def loader() -> Mapping[str, str]:
                with open(path, "r", encoding="utf-8") as f:
                    return json.load(f)
        else:
            raw = settings.HOSPITAL_URLS

            def loader() -> Mapping[str, str]:
                return json.loads(raw)

        directory = cls(loader(), loader=loader)
        logger.info(f"Hospital directory loaded with {len(directory)} hospitals: {', '.join(directory.ids())}")
        return directory

    def resolve(self, hospital_id: str) -> str:
        base_url = self._urls.get(hospital_id)
        if base_url is None:
            raise HospitalNotFound(hospital_id)
        return base_url

    def ids(self) -> List[str]:
        return sorted(self._urls)

    def reload(self) -> None:
        if self._loader is None:
            return
        # Build the new map fully before swapping so a bad source keeps the old one
        self._urls = _normalize(self._loader())
        logger.info(f"Hospital directory reloaded: {', '.join(self.ids())}")

    def __contains__(self, hospital_id: object) -> bool:
        return hospital_id in self._urls

    def __len__(self) -> int:
        return len(self._urls)
