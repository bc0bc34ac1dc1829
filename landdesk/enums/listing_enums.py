from enum import Enum


class FileType(str, Enum):
    TITLE_CLEAR = "Title Clear Lands"
    DISPUTE = "Dispute Lands"
    GOVT_DISPUTE = "Govt. Dispute Lands"
    FP_NA = "FP / NA"
    OTHERS = "Others"


class LandType(str, Enum):
    AGRICULTURE = "Agriculture"
    NON_AGRICULTURE = "None Agriculture"


class Tenure(str, Enum):
    OLD = "Old Tenure"
    NEW = "New Tenure"
    PREMIUM = "Premium"
