"""Customer profile and saved addresses, used to pre-fill checkout."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class SavedAddress:
    address_line_1: str = ""
    address_line_2: str = ""
    city: str = ""
    state: str = ""
    postal_code: str = ""
    country: str = ""
    is_default: bool = False


@dataclass(frozen=True)
class CustomerProfile:
    first_name: str = ""
    last_name: str = ""
    phone: str = ""
    addresses: tuple[SavedAddress, ...] = field(default_factory=tuple)

    @property
    def default_address(self) -> SavedAddress | None:
        """The address flagged default, else the first saved one."""
        for address in self.addresses:
            if address.is_default:
                return address
        return self.addresses[0] if self.addresses else None


# Indian states and union territories, lower-cased name -> code.
STATE_CODES = {
    "andaman and nicobar islands": "AN",
    "andhra pradesh": "AP",
    "arunachal pradesh": "AR",
    "assam": "AS",
    "bihar": "BR",
    "chandigarh": "CH",
    "chhattisgarh": "CT",
    "dadra and nagar haveli": "DN",
    "daman and diu": "DD",
    "delhi": "DL",
    "goa": "GA",
    "gujarat": "GJ",
    "haryana": "HR",
    "himachal pradesh": "HP",
    "jammu and kashmir": "JK",
    "jharkhand": "JH",
    "karnataka": "KA",
    "kerala": "KL",
    "ladakh": "LA",
    "lakshadweep": "LD",
    "madhya pradesh": "MP",
    "maharashtra": "MH",
    "manipur": "MN",
    "meghalaya": "ML",
    "mizoram": "MZ",
    "nagaland": "NL",
    "odisha": "OR",
    "puducherry": "PY",
    "punjab": "PB",
    "rajasthan": "RJ",
    "sikkim": "SK",
    "tamil nadu": "TN",
    "telangana": "TG",
    "tripura": "TR",
    "uttar pradesh": "UP",
    "uttarakhand": "UK",
    "west bengal": "WB",
}


def state_code(name: str) -> str:
    """Map a state name to its code; unknown names pass through unchanged."""
    return STATE_CODES.get(name.strip().lower(), name)
