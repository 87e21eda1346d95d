"""Annual CTC breakdown into earnings and statutory deductions."""

from __future__ import annotations

from dataclasses import asdict, dataclass

from ..core.constants import (
    ALLOWANCES_RATE,
    BASIC_RATE,
    ESI_RATE,
    HRA_RATE,
    OVERTIME_RATE_PER_HOUR,
    PF_RATE,
    PROFESSIONAL_TAX,
    TDS_RATE,
    UNPAID_LEAVE_DEDUCTION_PER_DAY,
)
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class SalaryBreakdown:
    basic: float
    hra: float
    allowances: float
    gross: float
    overtime_pay: float
    bonus: float
    pf: float
    esi: float
    professional_tax: float
    tds: float
    unpaid_leave_deduction: float
    total_deductions: float
    net: float
    monthly: float

    def to_dict(self) -> dict:
        return asdict(self)


def _r(value: float) -> float:
    return round(value, 2)


class SalaryCalculator:
    def calculate(
        self,
        ctc: float,
        *,
        bonus: float = 0,
        overtime_hours: float = 0,
        unpaid_leave_days: float = 0,
    ) -> SalaryBreakdown:
        if ctc is None or float(ctc) < 0:
            raise ValidationError("CTC must be a non-negative number")
        ctc = float(ctc)

        basic = ctc * BASIC_RATE
        hra = ctc * HRA_RATE
        allowances = ctc * ALLOWANCES_RATE
        gross = basic + hra + allowances

        pf = basic * PF_RATE
        esi = gross * ESI_RATE
        tds = gross * TDS_RATE
        overtime_pay = float(overtime_hours or 0) * OVERTIME_RATE_PER_HOUR
        unpaid = float(unpaid_leave_days or 0) * UNPAID_LEAVE_DEDUCTION_PER_DAY
        deductions = pf + esi + PROFESSIONAL_TAX + tds + unpaid

        net = gross + overtime_pay + float(bonus or 0) - deductions
        return SalaryBreakdown(
            basic=_r(basic),
            hra=_r(hra),
            allowances=_r(allowances),
            gross=_r(gross),
            overtime_pay=_r(overtime_pay),
            bonus=_r(float(bonus or 0)),
            pf=_r(pf),
            esi=_r(esi),
            professional_tax=_r(PROFESSIONAL_TAX),
            tds=_r(tds),
            unpaid_leave_deduction=_r(unpaid),
            total_deductions=_r(deductions),
            net=_r(net),
            monthly=_r(net / 12),
        )
