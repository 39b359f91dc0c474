"""Deterministic synthetic identities keyed by phone number.

Test operators type any phone number on the authorize form.  The same
number must always come back as the same person (so client apps can
re-login and find their existing account), and different numbers should
look like different people.

DERIVATION
-----------
Everything comes from sha256(phone).  Individual digest bytes act as
selectors and slices of the hex digest become the numeric identifiers:

  byte 6        gender (even → F, odd → M), picks the name lists
  bytes 0,1,2   given / family / patronymic name (index = byte % 10)
  bytes 3,4,5   birth year 1970–2000, month, day (day capped at 28)
  bytes 7,8     trusted (even), verified (not divisible by 3)
  hex[0:10]     oid        = 10**9 + value % 10**9
  hex[10:21]    SNILS      = value % 10**11, 11 digits
  hex[21:33]    INN        = value % 10**12, 12 digits
  hex[33:40]    email suffix

derive_identity() is a pure function of the phone number.  The
IdentityGenerator class only adds a process-lifetime cache in front of it.
"""

from __future__ import annotations

import hashlib
import logging
import threading

from app.core.metrics import IDENTITY_LOOKUPS
from app.models.identity import IdentityRecord

logger = logging.getLogger(__name__)

MALE_FIRST_NAMES = (
    "Иван", "Петр", "Сергей", "Александр", "Дмитрий",
    "Андрей", "Михаил", "Алексей", "Николай", "Владимир",
)  # fmt: skip
MALE_LAST_NAMES = (
    "Иванов", "Петров", "Сидоров", "Смирнов", "Кузнецов",
    "Попов", "Васильев", "Павлов", "Соколов", "Михайлов",
)  # fmt: skip
MALE_MIDDLE_NAMES = (
    "Иванович", "Петрович", "Сергеевич", "Александрович", "Дмитриевич",
    "Андреевич", "Михайлович", "Алексеевич", "Николаевич", "Владимирович",
)  # fmt: skip

FEMALE_FIRST_NAMES = (
    "Мария", "Анна", "Елена", "Ольга", "Татьяна",
    "Наталья", "Ирина", "Светлана", "Екатерина", "Юлия",
)  # fmt: skip
FEMALE_LAST_NAMES = (
    "Иванова", "Петрова", "Сидорова", "Смирнова", "Кузнецова",
    "Попова", "Васильева", "Павлова", "Соколова", "Михайлова",
)  # fmt: skip
FEMALE_MIDDLE_NAMES = (
    "Ивановна", "Петровна", "Сергеевна", "Александровна", "Дмитриевна",
    "Андреевна", "Михайловна", "Алексеевна", "Николаевна", "Владимировна",
)  # fmt: skip

OID_BASE = 1_000_000_000
CITIZENSHIP = "RUS"
STATUS = "REGISTERED"
EMAIL_DOMAIN = "example.com"

_LOWER_TRANSLIT = {
    "а": "a", "б": "b", "в": "v", "г": "g", "д": "d",
    "е": "e", "ё": "yo", "ж": "zh", "з": "z", "и": "i",
    "й": "y", "к": "k", "л": "l", "м": "m", "н": "n",
    "о": "o", "п": "p", "р": "r", "с": "s", "т": "t",
    "у": "u", "ф": "f", "х": "h", "ц": "ts", "ч": "ch",
    "ш": "sh", "щ": "sch", "ъ": "", "ы": "y", "ь": "",
    "э": "e", "ю": "yu", "я": "ya",
}  # fmt: skip

# Upper-case letters map to the capitalized form: "Ж" → "Zh".
TRANSLIT = {
    **_LOWER_TRANSLIT,
    **{k.upper(): v.capitalize() for k, v in _LOWER_TRANSLIT.items()},
}


def transliterate(text: str) -> str:
    """Cyrillic → Latin, letter by letter.  Anything else passes through."""
    return "".join(TRANSLIT.get(ch, ch) for ch in text)


def _hex_slice_mod(hex_digest: str, start: int, end: int, modulus: int) -> int:
    return int(hex_digest[start:end], 16) % modulus


def derive_identity(phone: str) -> IdentityRecord:
    digest = hashlib.sha256(phone.encode("utf-8")).digest()
    hex_digest = digest.hex()

    if digest[6] % 2 == 0:
        gender = "F"
        first_names, last_names, middle_names = (
            FEMALE_FIRST_NAMES,
            FEMALE_LAST_NAMES,
            FEMALE_MIDDLE_NAMES,
        )
    else:
        gender = "M"
        first_names, last_names, middle_names = (
            MALE_FIRST_NAMES,
            MALE_LAST_NAMES,
            MALE_MIDDLE_NAMES,
        )

    first_name = first_names[digest[0] % len(first_names)]
    last_name = last_names[digest[1] % len(last_names)]
    middle_name = middle_names[digest[2] % len(middle_names)]

    year = 1970 + digest[3] % 31
    month = 1 + digest[4] % 12
    day = 1 + digest[5] % 28  # valid in every month, February included
    birth_date = f"{day:02d}.{month:02d}.{year}"

    oid = str(OID_BASE + _hex_slice_mod(hex_digest, 0, 10, 10**9))
    snils = f"{_hex_slice_mod(hex_digest, 10, 21, 10**11):011d}"
    inn = f"{_hex_slice_mod(hex_digest, 21, 33, 10**12):012d}"

    email = (
        f"{transliterate(first_name)}.{transliterate(last_name)}"
        f".{hex_digest[33:40]}@{EMAIL_DOMAIN}"
    ).lower()

    return IdentityRecord(
        oid=oid,
        first_name=first_name,
        last_name=last_name,
        middle_name=middle_name,
        birth_date=birth_date,
        gender=gender,
        snils=snils,
        inn=inn,
        email=email,
        mobile=phone,
        trusted=digest[7] % 2 == 0,
        verified=digest[8] % 3 != 0,
        citizenship=CITIZENSHIP,
        status=STATUS,
    )


class IdentityGenerator:
    """Process-lifetime cache in front of derive_identity()."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._by_phone: dict[str, IdentityRecord] = {}

    def get_or_create(self, phone: str) -> IdentityRecord:
        with self._lock:
            record = self._by_phone.get(phone)
        if record is not None:
            IDENTITY_LOOKUPS.labels(result="hit").inc()
            return record

        with self._lock:
            # Another thread may have inserted while we were unlocked.
            record = self._by_phone.get(phone)
            if record is None:
                record = derive_identity(phone)
                self._by_phone[phone] = record
                created = True
            else:
                created = False

        if created:
            IDENTITY_LOOKUPS.labels(result="miss").inc()
            logger.info("Identity generated  oid=%s", record.oid)
        else:
            IDENTITY_LOOKUPS.labels(result="hit").inc()
        return record

    def get_all(self) -> dict[str, IdentityRecord]:
        with self._lock:
            return dict(self._by_phone)

    def count(self) -> int:
        with self._lock:
            return len(self._by_phone)

    def clear(self) -> None:
        with self._lock:
            self._by_phone.clear()
