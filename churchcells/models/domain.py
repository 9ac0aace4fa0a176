# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Domain constants and value objects — pure data, NO FastAPI dependency.
"""

from typing import Literal, Optional

from pydantic import BaseModel

ACTIVE_STATUS = "Active"
INACTIVE_STATUS = "Inactive"

WEEKDAYS = (
    "Monday", "Tuesday", "Wednesday", "Thursday",
    "Friday", "Saturday", "Sunday",
)

HOMECELL_EXPORT_FORMATS = ("pdf", "excel", "csv")
DISTRICT_EXPORT_FORMATS = ("pdf", "csv")

DEFAULT_DISTRICTS = [
    ("DIS-NAIROBI-CENTRAL", "Nairobi Central",
     "Central Nairobi district covering CBD and surrounding areas"),
    ("DIS-EASTLANDS", "Eastlands",
     "Eastlands district covering Buruburu, Umoja, Donholm, and surrounding areas"),
    ("DIS-THIKA-ROAD", "Thika Road",
     "Thika Road district covering Zimmerman, Kahawa, Roysambu, and surrounding areas"),
    ("DIS-SOUTH-NAIROBI", "South Nairobi",
     "South Nairobi district covering Lang'ata, Karen, South C/B, and surrounding areas"),
    ("DIS-WEST-NAIROBI", "West Nairobi",
     "West Nairobi district covering Kangemi, Uthiru, Dagoretti, and surrounding areas"),
    ("DIS-NORTH-NAIROBI", "Northern Nairobi",
     "Northern Nairobi district covering Muthaiga, Runda, Gigiri, and surrounding areas"),
    ("DIS-EAST-NAIROBI", "Eastern Nairobi",
     "Eastern Nairobi district covering Mathare, Huruma, Kariobangi, Dandora, and surrounding areas"),
    ("DIS-SOUTH-EAST-NAIROBI", "South East Nairobi",
     "South East Nairobi district covering Industrial Area, Mukuru, Imara Daima, and surrounding areas"),
    ("DIS-OUTSKIRTS-NAIROBI", "Outskirts Nairobi",
     "Outskirts Nairobi district covering Kitengela, Rongai, Ngong, Ruai, Juja, Thika, and surrounding areas"),
]


class AssignmentIntent(BaseModel):
    """What the UI should open next; carries no mutation by itself."""
    kind: Literal["assign", "transfer"]
    member_id: str
    member_name: str = ""
    current_home_cell: Optional[str] = None
