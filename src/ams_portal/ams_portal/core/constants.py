"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

IST_ZONE = "Asia/Kolkata"

DEFAULT_TOKEN_DAYS = 7
DEFAULT_JWT_KEY_ID = "ams-key"
DEFAULT_SSO_ISSUER = "sso-portal"
DEFAULT_SSO_AUDIENCE = "sso-apps"

# Entitlements granted to a new employee (days per year).
DEFAULT_SICK_ENTITLEMENT = 6
DEFAULT_CASUAL_ENTITLEMENT = 6
DEFAULT_PAID_ENTITLEMENT = 10

PROBATION_MONTHS = 6

# Attendance
FULL_DAY_HOURS = 8.5
DEFAULT_GRACE_MINUTES = 30
WEEKLY_LATE_ALLOWANCE = 3

# Shift policy (minutes)
WORKING_MINUTES = 510
PAID_BREAK_ALLOWANCE_MINUTES = 30
TOTAL_SHIFT_MINUTES = WORKING_MINUTES + PAID_BREAK_ALLOWANCE_MINUTES

# Leave policy
MONTHLY_REQUEST_LIMIT = 4
MONTHLY_WORKING_DAYS_LIMIT = 5
CASUAL_NOTICE_DAYS = 5
PLANNED_NOTICE_DAYS = 30
PLANNED_LONG_NOTICE_DAYS = 60
PLANNED_LONG_THRESHOLD_DAYS = 7
PLANNED_NOTICE_MONTHS = 2
PLANNED_HALF_YEAR_CAP = 5
WEEKDAY_RULE_BYPASS_DAYS = 10
SICK_LONG_LEAVE_DAYS = 6

# Payroll (fractions of annual CTC / gross)
BASIC_RATE = 0.40
HRA_RATE = 0.20
ALLOWANCES_RATE = 0.15
PF_RATE = 0.12
ESI_RATE = 0.0075
TDS_RATE = 0.05
PROFESSIONAL_TAX = 200
OVERTIME_RATE_PER_HOUR = 150
UNPAID_LEAVE_DEDUCTION_PER_DAY = 1000

DEFAULT_HISTORY_LIMIT = 30
