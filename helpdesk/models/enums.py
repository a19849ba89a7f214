from enum import Enum


class Role(str, Enum):
    USER = "USER"
    TECHNICIAN = "TECHNICIAN"
    ADMIN = "ADMIN"


class ReportStatus(str, Enum):
    OPEN = "OPEN"
    IN_PROGRESS = "IN_PROGRESS"
    RESOLVED = "RESOLVED"
    CLOSED = "CLOSED"


class Priority(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class IncidentType(str, Enum):
    # legacy categories, still accepted
    SYSTEM_FAILURE = "SYSTEM_FAILURE"
    HARDWARE_ISSUE = "HARDWARE_ISSUE"
    NETWORK_ISSUE = "NETWORK_ISSUE"

    COMPUTER_SLOW = "COMPUTER_SLOW"
    INTERNET_CONNECTION = "INTERNET_CONNECTION"
    EMAIL_ISSUES = "EMAIL_ISSUES"
    PRINTER_PROBLEMS = "PRINTER_PROBLEMS"
    SOFTWARE_CRASH = "SOFTWARE_CRASH"
    PASSWORD_RESET = "PASSWORD_RESET"
    FILE_ACCESS = "FILE_ACCESS"
    HARDWARE_MALFUNCTION = "HARDWARE_MALFUNCTION"
    VIRUS_MALWARE = "VIRUS_MALWARE"
    SYSTEM_UPDATE = "SYSTEM_UPDATE"


class ActivityAction(str, Enum):
    CREATED = "created"
    ASSIGNED = "assigned"
    UPDATED = "updated"
    COMMENTED = "commented"
    STATUS_CHANGED = "status_changed"


INCIDENT_TYPE_LABELS = {
    IncidentType.SYSTEM_FAILURE: "System failure",
    IncidentType.HARDWARE_ISSUE: "Hardware problem",
    IncidentType.NETWORK_ISSUE: "Network problem",
    IncidentType.COMPUTER_SLOW: "Slow computer",
    IncidentType.INTERNET_CONNECTION: "Internet connection",
    IncidentType.EMAIL_ISSUES: "Email problems",
    IncidentType.PRINTER_PROBLEMS: "Printer problems",
    IncidentType.SOFTWARE_CRASH: "Application crashes",
    IncidentType.PASSWORD_RESET: "Password reset",
    IncidentType.FILE_ACCESS: "File access",
    IncidentType.HARDWARE_MALFUNCTION: "Faulty hardware",
    IncidentType.VIRUS_MALWARE: "Virus/Malware",
    IncidentType.SYSTEM_UPDATE: "System update",
}

STATUS_LABELS = {
    ReportStatus.OPEN: "Open",
    ReportStatus.IN_PROGRESS: "In progress",
    ReportStatus.RESOLVED: "Resolved",
    ReportStatus.CLOSED: "Closed",
}

# statuses that still need work from someone
ACTIVE_STATUSES = (ReportStatus.OPEN, ReportStatus.IN_PROGRESS)
