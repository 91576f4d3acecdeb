"""
Data Models
Dataclasses for all entities. These are pure Python objects, no database logic.

Wire format (JSON bodies, embedded staff JSONB) uses camelCase keys;
attributes are snake_case. to_json / from_json convert between the two.
"""

from dataclasses import dataclass, field, fields, asdict
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional


def camel_case(name: str) -> str:
    """bank_account -> bankAccount"""
    head, *rest = name.split('_')
    return head + ''.join(part.title() for part in rest)


def _from_camel(cls, data: Dict[str, Any]) -> Dict[str, Any]:
    """Pick the dataclass fields of cls out of a camelCase (or snake_case) dict."""
    kwargs = {}
    for f in fields(cls):
        key = camel_case(f.name)
        if key in data:
            kwargs[f.name] = data[key]
        elif f.name in data:
            kwargs[f.name] = data[f.name]
    return kwargs


def _to_camel(obj) -> Dict[str, Any]:
    out = {}
    for key, value in asdict(obj).items():
        if isinstance(value, Enum):
            value = value.value
        elif isinstance(value, datetime):
            value = value.isoformat()
        out[camel_case(key)] = value
    return out


class CategoryType(str, Enum):
    """The fixed category partitions every contact belongs to."""
    GEOSANG = 'GEOSANG'              # organization chart
    OUTSOURCE = 'OUTSOURCE'          # outsourced team
    PURCHASE = 'PURCHASE'            # purchase vendor
    FRANCHISE_HQ = 'FRANCHISE_HQ'    # franchise headquarters
    FRANCHISE_BR = 'FRANCHISE_BR'    # franchise branch
    INTERIOR = 'INTERIOR'            # interior contractor
    SALES = 'SALES'                  # sales client
    OTHERS = 'OTHERS'

    @property
    def label(self) -> str:
        return CATEGORY_LABELS[self]


CATEGORY_LABELS = {
    CategoryType.GEOSANG: '거상 조직도',
    CategoryType.OUTSOURCE: '외주팀 관리',
    CategoryType.PURCHASE: '매입 거래처',
    CategoryType.FRANCHISE_HQ: '프랜차이즈 본사',
    CategoryType.FRANCHISE_BR: '프랜차이즈 지점',
    CategoryType.INTERIOR: '인테리어',
    CategoryType.SALES: '자영업(매출처)',
    CategoryType.OTHERS: '기타 거래처',
}


class VocabularyType(str, Enum):
    """The three controlled vocabularies contacts refer to by value."""
    DEPARTMENT = 'department'
    INDUSTRY = 'industry'
    OUTSOURCE_TYPE = 'outsource_type'

    @property
    def slug(self) -> str:
        """URL segment under /api/settings/."""
        return _VOCABULARY_SLUGS[self]

    @classmethod
    def parse(cls, raw: str) -> 'VocabularyType':
        """
        Accept the enum value, the URL slug, or the short codes the web UI sends
        (DEPT / INDUSTRY / OUTSOURCE). Raises ValueError for anything else.
        """
        key = (raw or '').strip()
        found = _VOCABULARY_ALIASES.get(key) or _VOCABULARY_ALIASES.get(key.lower())
        if found is None:
            raise ValueError(f"Unknown vocabulary type: {raw!r}")
        return found


_VOCABULARY_SLUGS = {
    VocabularyType.DEPARTMENT: 'departments',
    VocabularyType.INDUSTRY: 'industries',
    VocabularyType.OUTSOURCE_TYPE: 'outsource-types',
}

_VOCABULARY_ALIASES = {
    'department': VocabularyType.DEPARTMENT,
    'departments': VocabularyType.DEPARTMENT,
    'DEPT': VocabularyType.DEPARTMENT,
    'industry': VocabularyType.INDUSTRY,
    'industries': VocabularyType.INDUSTRY,
    'INDUSTRY': VocabularyType.INDUSTRY,
    'outsource_type': VocabularyType.OUTSOURCE_TYPE,
    'outsource-types': VocabularyType.OUTSOURCE_TYPE,
    'outsource-type': VocabularyType.OUTSOURCE_TYPE,
    'OUTSOURCE': VocabularyType.OUTSOURCE_TYPE,
}

DEFAULT_VOCABULARIES = {
    VocabularyType.DEPARTMENT: ['총무팀', '관리팀', '디자인팀', '시공팀', '감리팀', '영업팀', '제작팀', '마케팅팀'],
    VocabularyType.INDUSTRY: ['프랜차이즈', '기업', '요식업', '공장', '부동산/건설', '미용/헬스', '병원/약국', '학원', '교육업', '인테리어'],
    VocabularyType.OUTSOURCE_TYPE: ['시공일당', '크레인'],
}


@dataclass
class Staff:
    """A person attached to a contact. Stored embedded in the contact row."""
    id: Optional[str] = None
    name: str = ''
    position: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    department: Optional[str] = None
    rating: Optional[float] = None
    region: Optional[str] = None
    bank_account: Optional[str] = None
    resident_number: Optional[str] = None
    features: Optional[str] = None
    id_card_file: Optional[Dict[str, Any]] = None
    bank_book_file: Optional[Dict[str, Any]] = None

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> 'Staff':
        return cls(**_from_camel(cls, data))

    def to_json(self) -> Dict[str, Any]:
        return {k: v for k, v in _to_camel(self).items() if v is not None}


@dataclass
class Contact:
    """Contact entity (organization, vendor, franchise, client, outsourced worker...)"""
    id: Optional[str] = None
    category: CategoryType = CategoryType.OTHERS
    brand_name: Optional[str] = None
    industry: Optional[str] = None
    sub_category: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    phone2: Optional[str] = None
    email: Optional[str] = None
    homepage: Optional[str] = None
    bank_account: Optional[str] = None
    license_file: Optional[Dict[str, Any]] = None
    attachments: List[Dict[str, Any]] = field(default_factory=list)
    staff_list: List[Staff] = field(default_factory=list)
    memo: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> 'Contact':
        """Build from a contacts row (snake_case columns, JSONB already decoded)."""
        data = dict(row)
        data['category'] = CategoryType(data['category'])
        data['staff_list'] = [Staff.from_json(s) for s in (data.get('staff_list') or [])]
        data['attachments'] = data.get('attachments') or []
        return cls(**{f.name: data[f.name] for f in fields(cls) if f.name in data})

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> 'Contact':
        kwargs = _from_camel(cls, data)
        if 'category' in kwargs:
            kwargs['category'] = CategoryType(kwargs['category'])
        kwargs['staff_list'] = [Staff.from_json(s) for s in (kwargs.get('staff_list') or [])]
        kwargs['attachments'] = kwargs.get('attachments') or []
        return cls(**kwargs)

    def to_json(self) -> Dict[str, Any]:
        out = _to_camel(self)
        out['staffList'] = [s.to_json() for s in self.staff_list]
        return out


LABOR_CLAIM_STATUSES = ('pending', 'approved', 'paid')

BREAKDOWN_AMOUNT_KEYS = (
    'basePay', 'overtimePay', 'transportFee', 'mealFee', 'fuelFee', 'tollFee', 'otherFee',
)


@dataclass
class LaborClaim:
    """One worker's labor cost claim for one work day, split across sites."""
    id: Optional[str] = None
    worker_id: Optional[str] = None
    worker_name: Optional[str] = None
    worker_phone: Optional[str] = None
    date: Optional[str] = None
    sites: List[Dict[str, Any]] = field(default_factory=list)
    breakdown: Dict[str, Any] = field(default_factory=dict)
    total_amount: float = 0
    status: str = 'pending'
    approved_by: Optional[str] = None
    approved_at: Optional[str] = None
    paid_at: Optional[str] = None
    memo: Optional[str] = None
    raw_text: Optional[str] = None
    claimed_at: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> 'LaborClaim':
        data = dict(row)
        data['date'] = data.pop('work_date', None)
        if data.get('total_amount') is not None:
            data['total_amount'] = float(data['total_amount'])
        data['sites'] = data.get('sites') or []
        data['breakdown'] = data.get('breakdown') or {}
        return cls(**{f.name: data[f.name] for f in fields(cls) if f.name in data})

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> 'LaborClaim':
        kwargs = _from_camel(cls, data)
        # The web client sends its own creation stamp as createdAt
        if 'createdAt' in data:
            kwargs.pop('created_at', None)
            kwargs['claimed_at'] = data['createdAt']
        return cls(**kwargs)

    def to_json(self) -> Dict[str, Any]:
        out = _to_camel(self)
        out['createdAt'] = self.claimed_at or out['createdAt']
        return out


@dataclass
class AuthUser:
    """An account allowed to sign in. The password hash never leaves the store."""
    id: Optional[str] = None
    name: str = ''
    username: str = ''
    created_at: Optional[datetime] = None

    def to_json(self) -> Dict[str, Any]:
        return {'id': self.id, 'name': self.name, 'username': self.username}


@dataclass
class StoredFile:
    """Description of an object written to the file store."""
    key: str = ''
    name: str = ''
    mime_type: str = 'application/octet-stream'
    size: int = 0
    uploaded_at: Optional[datetime] = None

    @property
    def url(self) -> str:
        return f"/api/files/{self.key}"

    def to_json(self) -> Dict[str, Any]:
        out = _to_camel(self)
        out['url'] = self.url
        return out
