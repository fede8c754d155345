# campus_connect/core/constants.py

from enum import Enum


# ==========================================================
# DEPARTMENT CODES
# ==========================================================
class Department(str, Enum):
    CCS = "CCS"
    COE = "COE"
    COC = "COC"
    CED = "CED"
    CAS = "CAS"
    CBAA = "CBAA"


DEPARTMENT_LABELS = {
    Department.CCS: "College of Computer Studies",
    Department.COE: "College of Engineering",
    Department.COC: "College of Criminology",
    Department.CED: "College of Education",
    Department.CAS: "College of Arts and Sciences",
    Department.CBAA: "College of Business Administration and Accountancy",
}


# ==========================================================
# ROLE EMAIL CONVENTIONS
# ==========================================================
CAMPUS_EMAIL_DOMAIN = "spc.edu"

# Mailbox suffix each department-scoped role must sign up with
ROLE_EMAIL_SUFFIX = {
    "admin": "admin",
    "super_admin": "head",
}

MIN_PASSWORD_LENGTH = 6

ALLOWED_IMAGE_PREFIX = "image/"


def expected_role_email(role: str, department: str) -> str | None:
    """
    Returns the only email address allowed to register the given
    role for a department, e.g. ``ccs-admin@spc.edu``.
    None means the role has no email convention.
    """
    role = role.value if isinstance(role, Enum) else role
    department = department.value if isinstance(department, Enum) else department

    suffix = ROLE_EMAIL_SUFFIX.get(role)
    if suffix is None:
        return None
    return f"{department.lower()}-{suffix}@{CAMPUS_EMAIL_DOMAIN}"


# ==========================================================
# LANDING ROUTES
# ==========================================================
SUPER_ADMIN_HOME = "/super-admin-dashboard"
DASHBOARD_HOME = "/dashboard"
