"""Read-only reference data: business profiles and the lender catalog"""

import json
from pathlib import Path
from typing import Dict, List, Optional
from kobi_gateway.config import settings
from kobi_gateway.domain.models import BusinessProfile, CreditProduct, LenderOffer

DEFAULT_DATA_DIR = Path(__file__).resolve().parents[1] / "data"


def _data_dir(data_dir: str | Path | None) -> Path:
    return Path(data_dir or settings.data_dir or DEFAULT_DATA_DIR)


def _load(path: Path, root_key: str) -> List[dict]:
    return json.loads(path.read_text(encoding="utf-8"))[root_key]


class ProfileRepository:
    """Business profile lookup backed by profiles.json"""

    def __init__(self, profiles: List[BusinessProfile]):
        self._profiles: Dict[str, BusinessProfile] = {p.id: p for p in profiles}

    @classmethod
    def from_file(cls, data_dir: str | Path | None = None) -> "ProfileRepository":
        records = _load(_data_dir(data_dir) / "profiles.json", "profiles")
        return cls([BusinessProfile(**record) for record in records])

    def get_profile(self, profile_id: str) -> Optional[BusinessProfile]:
        return self._profiles.get(profile_id)


class LenderCatalog:
    """Lender offers backed by lenders.json, in catalog order"""

    def __init__(self, offers: List[LenderOffer]):
        self._offers = list(offers)

    @classmethod
    def from_file(cls, data_dir: str | Path | None = None) -> "LenderCatalog":
        records = _load(_data_dir(data_dir) / "lenders.json", "lenders")
        offers = [
            LenderOffer(
                **{k: v for k, v in record.items() if k != "credit_products"},
                credit_products=[CreditProduct(**p) for p in record.get("credit_products", [])],
            )
            for record in records
        ]
        return cls(offers)

    def list_offers(self, min_score: float | None = None) -> List[LenderOffer]:
        """All offers, or only those a score of min_score qualifies for"""
        if min_score is None:
            return list(self._offers)
        return [o for o in self._offers if o.minimum_score <= min_score]

    def get_offer(self, offer_id: str) -> Optional[LenderOffer]:
        return next((o for o in self._offers if o.id == offer_id), None)
