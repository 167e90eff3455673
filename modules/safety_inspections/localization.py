"""Display strings for the two supported locales (``zh`` and ``en``)."""

from __future__ import annotations

from typing import Dict, Mapping, Sequence

from . import config
from .models import ActionStatus, Likelihood, RiskLevel, Severity

LOCALES: Sequence[str] = ("zh", "en")

RISK_LEVEL_LABELS: Mapping[str, Mapping[RiskLevel, str]] = {
    "en": {level: level.value for level in RiskLevel},
    "zh": {
        RiskLevel.LOW: "低",
        RiskLevel.MEDIUM: "中",
        RiskLevel.HIGH: "高",
        RiskLevel.EXTREME: "極高",
    },
}

ACTION_STATUS_LABELS: Mapping[str, Mapping[ActionStatus, str]] = {
    "en": {status: status.value for status in ActionStatus},
    "zh": {
        ActionStatus.PENDING: "待處理",
        ActionStatus.FOLLOW_UP: "跟進中",
        ActionStatus.COMPLETED: "已完成",
    },
}

LIKELIHOOD_LABELS: Mapping[str, Mapping[Likelihood, str]] = {
    "en": {value: value.value for value in Likelihood},
    "zh": {
        Likelihood.RARE: "罕見",
        Likelihood.UNLIKELY: "不大可能",
        Likelihood.POSSIBLE: "可能",
        Likelihood.LIKELY: "很大機會",
        Likelihood.ALMOST_CERTAIN: "幾乎肯定",
    },
}

SEVERITY_LABELS: Mapping[str, Mapping[Severity, str]] = {
    "en": {value: value.value for value in Severity},
    "zh": {
        Severity.NEGLIGIBLE: "可忽略",
        Severity.MINOR: "輕微",
        Severity.MODERATE: "中等",
        Severity.MAJOR: "嚴重",
        Severity.CATASTROPHIC: "災難性",
    },
}

REPORT_STATUS_LABELS: Mapping[str, Mapping[str, str]] = {
    "en": {"Draft": "Draft", "Submitted": "Submitted"},
    "zh": {"Draft": "草稿", "Submitted": "已提交"},
}

PREPARER_TITLE: Mapping[str, str] = {
    "en": "Registered Safety Officer (RSO)",
    "zh": "註冊安全主任 (RSO)",
}

PHOTO_UPLOADED: Mapping[str, str] = {
    "en": "[Image Data Uploaded]",
    "zh": "[已上傳照片數據]",
}

CSV_HEADERS: Mapping[str, Sequence[str]] = {
    "en": (
        "Date",
        "Location",
        "Category",
        "Observation",
        "Risk Level",
        "Remedial Action",
        "Target Date",
        "Status",
        "Inspector",
        "Photo URL",
    ),
    "zh": (
        "日期",
        "地點",
        "類別",
        "發現事項",
        "風險等級",
        "補救措施",
        "目標完成日期",
        "狀態",
        "巡查員",
        "照片連結",
    ),
}

# Narrative generator fallbacks.
ASSESSMENT_EMPTY: Mapping[str, tuple[str, str]] = {
    "en": ("Cannot generate", "Manual review required"),
    "zh": ("無法生成", "請人手覆核"),
}
ASSESSMENT_ERROR: Mapping[str, tuple[str, str]] = {
    "en": ("Error generating assessment", "Please enter manually"),
    "zh": ("生成評估時發生錯誤", "請手動輸入"),
}
SUMMARY_EMPTY: Mapping[str, str] = {
    "en": "Summary could not be generated.",
    "zh": "無法生成摘要。",
}
SUMMARY_ERROR: Mapping[str, str] = {
    "en": "Error generating weekly summary. Check connection.",
    "zh": "生成週報摘要時發生錯誤。請檢查網絡連接。",
}

PDF_LABELS: Mapping[str, Dict[str, str]] = {
    "en": {
        "title": "Weekly Safety Inspection Report",
        "report_no": "Report No.",
        "period": "Period",
        "report_date": "Report Date",
        "status": "Status",
        "summary": "1.0 Report Summary",
        "total_inspections": "Total inspections",
        "critical": "Critical hazards",
        "records": "2.0 Weekly Inspection Record",
        "findings": "3.0 Non-Compliance & Remedial Action Log",
        "endorsement": "4.0 Endorsement",
        "prepared_by": "Prepared by",
        "endorsed_by": "Endorsed by",
        "date": "Date",
        "location": "Location",
        "inspector": "Inspector",
        "overall_risk": "Overall Risk",
        "items": "Items",
        "category": "Category",
        "observation": "Observation",
        "risk": "Risk",
        "action": "Remedial Action",
        "target": "Target Date",
        "action_status": "Status",
        "evidence": "Evidence",
        "photo": "Photo on file",
        "none": "No inspections recorded for this week.",
        "no_findings": "No non-compliance items recorded.",
    },
    "zh": {
        "title": "每週安全巡查報告",
        "report_no": "報告編號",
        "period": "期間",
        "report_date": "報告日期",
        "status": "狀態",
        "summary": "1.0 報告摘要",
        "total_inspections": "巡查總數",
        "critical": "嚴重危害",
        "records": "2.0 每週巡查記錄",
        "findings": "3.0 違規事項及改善措施記錄",
        "endorsement": "4.0 簽署",
        "prepared_by": "編製人",
        "endorsed_by": "審批人",
        "date": "日期",
        "location": "地點",
        "inspector": "巡查員",
        "overall_risk": "整體風險",
        "items": "項目",
        "category": "類別",
        "observation": "觀察結果",
        "risk": "風險",
        "action": "改善措施",
        "target": "目標日期",
        "action_status": "狀態",
        "evidence": "證據",
        "photo": "已存檔照片",
        "none": "本週沒有巡查記錄。",
        "no_findings": "沒有違規事項記錄。",
    },
}


FORM_3A_LABELS: Mapping[str, Dict[str, str]] = {
    "en": {
        "title": "Factory Safety Record (Form 3A)",
        "inspection_no": "Inspection #",
        "recorded": "Recorded",
        "summary": "Overall Summary",
        "inspector": "Inspector:",
        "overall_risk": "Overall Risk",
        "list": "Inspection List",
        "category": "Category",
        "status": "Status",
        "risk": "Risk",
        "violation": "Violation",
        "compliant": "Compliant",
        "likelihood": "Likelihood",
        "severity": "Severity",
        "observation": "Observation",
        "action": "Remedial Action",
        "target": "Target Date",
        "evidence": "Evidence",
        "photo": "Photo on file",
        "footer": "Factory SafetyHub • Cap. 59 Compliance Record",
    },
    "zh": {
        "title": "工廠安全記錄 (表格 3A)",
        "inspection_no": "巡查編號",
        "recorded": "已記錄",
        "summary": "整體摘要",
        "inspector": "巡查員:",
        "overall_risk": "整體風險",
        "list": "巡查清單",
        "category": "類別",
        "status": "狀態",
        "risk": "風險",
        "violation": "違規",
        "compliant": "合規",
        "likelihood": "可能性",
        "severity": "嚴重性",
        "observation": "觀察",
        "action": "補救措施",
        "target": "目標完成日期",
        "evidence": "證據",
        "photo": "已存檔照片",
        "footer": "工廠安全中心 • 符合香港法例第59章記錄",
    },
}


def normalize_locale(value: str | None) -> str:
    """Return ``value`` when supported, else the configured default locale."""
    if value:
        value = value.strip().lower()[:2]
        if value in LOCALES:
            return value
    fallback = config.default_locale()
    return fallback if fallback in LOCALES else "zh"


def risk_label(level: RiskLevel | None, locale: str) -> str:
    if level is None:
        return ""
    return RISK_LEVEL_LABELS[normalize_locale(locale)][level]


def action_status_label(status: ActionStatus | None, locale: str) -> str:
    if status is None:
        return ""
    return ACTION_STATUS_LABELS[normalize_locale(locale)][status]


def inspection_summary(location: str, at_risk_count: int, locale: str) -> str:
    if normalize_locale(locale) == "zh":
        return f"地點：{location}。發現 {at_risk_count} 項違規事項。"
    return f"Location: {location}. Found {at_risk_count} non-compliance items."


def preparer_title(locale: str) -> str:
    return PREPARER_TITLE[normalize_locale(locale)]
