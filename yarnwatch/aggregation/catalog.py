"""Metric catalog: trend groups, their parameters and the search report columns."""

from dataclasses import dataclass

from yarnwatch.utils.types import MetricGroup, MetricType


@dataclass(frozen=True)
class ReportColumn:
    title: str
    type: MetricType
    field: str | None = None


CUT_METRICS = [
    "YarnFaults", "YarnJoints", "YarnBreaks", "NCuts", "SCuts", "LCuts",
    "TCuts", "FDCuts", "PPCuts", "CpCuts", "CmCuts", "CCpCuts", "CCmCuts",
    "JpCuts", "JmCuts", "PFCuts",
]

QUALITY_METRICS = [
    "Nep140", "Nep200", "Nep280", "Nep400", "Thick35", "Thick50", "Thick70",
    "Thick100", "Thin40", "Thin30", "Thin50", "Thin60",
]

RATIO_METRICS = ["CVAvg", "HAvg"]

# Blocks that make up totalAlarms. YABlks is selectable but not part of the total.
ALARM_COLUMNS = [
    "NSABlks", "LABlks", "TABlks", "CABlks", "CCABlks", "FABlks",
    "PPABlks", "PFABlks", "CVpABlks", "HpABlks", "CMTABlks",
]

CMT_METRICS = ["B_A1Events", "B_A2Events", "B_B1Events", "B_B2Events"]

IPI_COMPONENTS = ["Thin50", "Thick50", "Nep200"]
HSIPI_COMPONENTS = ["Thin40", "Thick35", "Nep140"]

COMPOSITE_METRICS = ["IPI", "HSIPI", "totalAlarms"]

GROUP_PARAMETERS: dict[MetricGroup, list[str]] = {
    MetricGroup.QUALITY: [*QUALITY_METRICS, *RATIO_METRICS, "IPI", "HSIPI"],
    MetricGroup.CUTS: CUT_METRICS,
    MetricGroup.ALARMS: ["totalAlarms", "YABlks", *ALARM_COLUMNS],
    MetricGroup.CMT: CMT_METRICS,
}

DEFAULT_GROUP_PARAMETERS = {
    MetricGroup.QUALITY: "IPI",
    MetricGroup.CUTS: "YarnFaults",
    MetricGroup.ALARMS: "totalAlarms",
    MetricGroup.CMT: "B_A1Events",
}

PARAMETER_SHORT_NAMES = {
    "YarnFaults": "YF", "NCuts": "N", "SCuts": "S", "LCuts": "L", "TCuts": "T",
    "FDCuts": "FD", "PPCuts": "PP", "CpCuts": "Cp", "CmCuts": "Cm", "CCpCuts": "CCp",
    "CCmCuts": "CCm", "JpCuts": "Jp", "JmCuts": "Jm", "PFCuts": "PF",
    "YarnJoints": "YJ", "YarnBreaks": "YB", "B_A1Events": "A1", "B_A2Events": "A2",
    "B_B1Events": "B1", "B_B2Events": "B2", "CVAvg": "CV%", "HAvg": "H",
    "NSABlks": "NS", "LABlks": "LA", "TABlks": "TA", "CABlks": "CA", "CCABlks": "CCA",
    "FABlks": "FA", "PPABlks": "PPA", "PFABlks": "PFA", "CVpABlks": "CVpA",
    "HpABlks": "HpA", "CMTABlks": "CMTA", "YABlks": "YA",
    "IPI": "IPI", "HSIPI": "HS IPI", "totalAlarms": "Total Alarms",
}

REPORT_COLUMNS = [
    ReportColumn("YF", MetricType.PER_LENGTH, "YarnFaults"),
    ReportColumn("N", MetricType.PER_LENGTH, "NCuts"),
    ReportColumn("S", MetricType.PER_LENGTH, "SCuts"),
    ReportColumn("L", MetricType.PER_LENGTH, "LCuts"),
    ReportColumn("T", MetricType.PER_LENGTH, "TCuts"),
    ReportColumn("FD", MetricType.PER_LENGTH, "FDCuts"),
    ReportColumn("PP", MetricType.PER_LENGTH, "PPCuts"),
    ReportColumn("Cp", MetricType.PER_LENGTH, "CpCuts"),
    ReportColumn("CCp", MetricType.PER_LENGTH, "CCpCuts"),
    ReportColumn("Cm", MetricType.PER_LENGTH, "CmCuts"),
    ReportColumn("CCm", MetricType.PER_LENGTH, "CCmCuts"),
    ReportColumn("CV%", MetricType.SIMPLE_AVG, "CVAvg"),
    ReportColumn("H", MetricType.SIMPLE_AVG, "HAvg"),
    ReportColumn("A1", MetricType.PER_LENGTH, "B_A1Events"),
    ReportColumn("IPI", MetricType.CUSTOM_TOTAL_IPI),
    ReportColumn("HS IPI", MetricType.CUSTOM_TOTAL_HSIPI),
]

NUMERIC_METRICS = list(dict.fromkeys([
    *CUT_METRICS, *QUALITY_METRICS, *RATIO_METRICS, "YABlks", *ALARM_COLUMNS, *CMT_METRICS,
]))

_CANONICAL = {name.lower(): name for name in [*NUMERIC_METRICS, *COMPOSITE_METRICS]}


def canonical_metric(name: str) -> str:
    """Map any casing of a metric name ("yarnFaults", "cvavg") to its catalog name."""
    try:
        return _CANONICAL[str(name).lower()]
    except KeyError:
        raise ValueError(f"Unknown metric: {name}") from None


def metric_group_of(metric: str) -> MetricGroup:
    metric = canonical_metric(metric)
    for group, params in GROUP_PARAMETERS.items():
        if metric in params:
            return group
    raise ValueError(f"Metric {metric} does not belong to any trend group")


def short_name(metric: str) -> str:
    return PARAMETER_SHORT_NAMES.get(metric, metric)


def trend_metric_type(group: MetricGroup, metric: str) -> MetricType:
    """Metric type the trend engine finalizes a parameter with."""
    match group:
        case MetricGroup.QUALITY if metric in RATIO_METRICS:
            return MetricType.SIMPLE_AVG
        case MetricGroup.QUALITY:
            return MetricType.PER_REF_LENGTH
        case MetricGroup.CUTS | MetricGroup.CMT:
            return MetricType.PER_LENGTH
        case MetricGroup.ALARMS:
            return MetricType.RAW_COUNT
        case other:
            raise ValueError(f"Unknown metric group: {other}")
