"""Demonstration records written to an empty store on first load."""

from __future__ import annotations

from datetime import date
from typing import List

from .models import (
    ActionStatus,
    ComplianceStatus,
    Finding,
    InspectionRecord,
    Remediation,
    RiskAssessment,
)

DEMO_USER_ID = "u1"
DEMO_USER_NAME = "陳大文"


def seed_records() -> List[InspectionRecord]:
    """Return fresh copies of the demonstration inspections, newest first."""
    guarding = Finding(
        id="1",
        category="機械防護",
        status=ComplianceStatus.AT_RISK,
        description="傳送帶檢查",
        observation="次級皮帶驅動器缺少護欄。",
        remedial_action="立即安裝臨時圍欄。訂購更換護罩。",
        photo_url="https://picsum.photos/seed/safety1/400/300",
        risk=RiskAssessment.assess("Possible", "Major"),
        remediation=Remediation(ActionStatus.FOLLOW_UP, date(2023, 10, 31)),
    )
    return [
        InspectionRecord(
            id="INS-1715421",
            date=date(2023, 10, 24),
            location="生產線 A",
            inspector_id=DEMO_USER_ID,
            inspector_name=DEMO_USER_NAME,
            findings=(guarding,),
            summary="生產線 A 發現嚴重的防護問題。已立即採取行動封鎖該區域。",
        ),
        # Legacy record saved before findings were required.
        InspectionRecord(
            id="INS-1715428",
            date=date(2023, 10, 23),
            location="倉庫 1 區",
            inspector_id=DEMO_USER_ID,
            inspector_name=DEMO_USER_NAME,
            summary="完成例行檢查。未發現重大危險。內務管理有所改善。",
        ),
    ]
