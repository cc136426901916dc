"""Shared type definitions for the dashboard engine."""

from enum import StrEnum


type RawRecord = dict[str, str | int | float | bool | None]
type RecordBatch = list[RawRecord]
type TrendRow = dict[str, str]


class GroupKey(StrEnum):
    UNIT = "unit"
    ARTICLE_NAME = "articleName"
    ARTICLE_NUMBER = "articleNumber"
    LOT_ID = "lotId"
    MACHINE_NAME = "machineName"
    SHIFT_START_TIME = "shiftStartTime"

    @property
    def column(self) -> str:
        return GROUP_KEY_COLUMNS[self]

    @classmethod
    def parse(cls, value: "str | GroupKey") -> "GroupKey":
        """Accept enum values, UI ids ("articlename") and wire names ("MillUnit")."""
        if isinstance(value, cls):
            return value
        token = str(value).replace("_", "").lower()
        match token:
            case "unit" | "millunit":
                return cls.UNIT
            case "articlename":
                return cls.ARTICLE_NAME
            case "articlenumber":
                return cls.ARTICLE_NUMBER
            case "lotid":
                return cls.LOT_ID
            case "machinename" | "machine":
                return cls.MACHINE_NAME
            case "shiftstarttime" | "date":
                return cls.SHIFT_START_TIME
            case _:
                raise ValueError(f"Unknown group key: {value}")


GROUP_KEY_COLUMNS = {
    GroupKey.UNIT: "mill_unit",
    GroupKey.ARTICLE_NAME: "article_name",
    GroupKey.ARTICLE_NUMBER: "article_number",
    GroupKey.LOT_ID: "lot_id",
    GroupKey.MACHINE_NAME: "machine_name",
    GroupKey.SHIFT_START_TIME: "shift_start_time",
}


class Granularity(StrEnum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    SHIFT = "shift"


class MetricGroup(StrEnum):
    QUALITY = "quality"
    CUTS = "cuts"
    ALARMS = "alarms"
    CMT = "cmt"


class MetricType(StrEnum):
    PER_LENGTH = "perLength"
    SIMPLE_AVG = "simpleAvg"
    PER_REF_LENGTH = "perRefLength"
    CUSTOM_TOTAL_IPI = "customTotalIPI"
    CUSTOM_TOTAL_HSIPI = "customTotalHSIPI"
    RAW_COUNT = "rawCount"
