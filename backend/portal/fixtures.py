"""Static fallback dataset served when Airtable isn't configured."""

from portal.schemas.content import Announcement, QuickAccessItem, RecentActivity
from portal.schemas.members import MemberAccount, SubscriptionStatus
from portal.schemas.programs import ClinicalProgram
from portal.schemas.resources import ResourceItem, ResourceType

MOCK_TOKEN = "mock-jwt-token"

MOCK_MEMBER = MemberAccount(
    id="mem_demo",
    pharmacy_name="Main Street Pharmacy",
    email="demo@clinicalrxq.com",
    subscription_status=SubscriptionStatus.ACTIVE,
    last_login_iso="2026-01-05T14:00:00Z",
)

PROGRAMS = [
    ClinicalProgram(
        slug="tmm",
        name="TimeMyMeds",
        description="Medication synchronization to create appointment-based workflows.",
        icon="CalendarCheck",
        resource_count=4,
        last_updated_iso="2025-11-02T10:00:00Z",
        download_count=1240,
    ),
    ClinicalProgram(
        slug="mtmtft",
        name="MTM The Future Today",
        description="Team-based medication therapy management with billing support.",
        icon="Pill",
        resource_count=3,
        last_updated_iso="2025-10-18T09:00:00Z",
        download_count=980,
    ),
    ClinicalProgram(
        slug="tnt",
        name="Test and Treat",
        description="Point-of-care testing and treatment for flu, strep and COVID-19.",
        icon="TestTube2",
        resource_count=2,
        last_updated_iso="2025-09-30T12:00:00Z",
        download_count=760,
    ),
    ClinicalProgram(
        slug="a1c",
        name="HbA1c Testing",
        description="Diabetes screening and monitoring with CLIA-waived A1c testing.",
        icon="ActivitySquare",
        resource_count=2,
        last_updated_iso="2025-08-21T15:30:00Z",
        download_count=540,
    ),
    ClinicalProgram(
        slug="oc",
        name="Contraceptive Services",
        description="Pharmacist-prescribed hormonal contraception.",
        icon="Stethoscope",
        resource_count=1,
        last_updated_iso="2025-07-14T08:45:00Z",
        download_count=410,
    ),
]


def _resource(
    id: str,
    name: str,
    program: str,
    type: ResourceType,
    category: str | None = None,
    size_mb: float | None = None,
    last_updated_iso: str | None = None,
    download_count: int | None = None,
) -> ResourceItem:
    return ResourceItem(
        id=id,
        name=name,
        program=program,
        type=type,
        category=category,
        file_url=f"https://files.clinicalrxq.com/{id}.pdf",
        size_mb=size_mb,
        last_updated_iso=last_updated_iso,
        download_count=download_count,
    )


RESOURCES = [
    _resource("res_tmm_enroll", "Patient Enrollment Form", "tmm", ResourceType.DOCUMENTATION_FORMS,
              "Enrollment", 0.42, "2025-11-01T10:00:00Z", 320),
    _resource("res_tmm_protocol", "Med Sync Protocol", "tmm", ResourceType.PROTOCOLS,
              None, 1.2, "2025-10-12T10:00:00Z", 210),
    _resource("res_tmm_training", "Appointment-Based Model Training", "tmm", ResourceType.TRAINING_MATERIALS,
              "45 min", 24.5, "2025-09-03T10:00:00Z", 150),
    _resource("res_mtm_cmr", "Comprehensive Medication Review Form", "mtmtft", ResourceType.DOCUMENTATION_FORMS,
              "CMR", 0.35, "2025-10-20T10:00:00Z", 410),
    _resource("res_mtm_billing", "MTM Billing Codes Quick Reference", "general", ResourceType.MEDICAL_BILLING,
              None, 0.18, "2025-08-11T10:00:00Z", 275),
    _resource("res_tnt_flu", "Influenza Test and Treat Protocol", "tnt", ResourceType.PROTOCOLS,
              None, 0.9, "2025-09-28T10:00:00Z", 330),
    _resource("res_tnt_consent", "Point-of-Care Testing Consent", "tnt", ResourceType.DOCUMENTATION_FORMS,
              "Consent", 0.21, "2025-09-29T10:00:00Z", 190),
    _resource("res_a1c_handout", "Understanding Your A1c", "general", ResourceType.PATIENT_HANDOUTS,
              None, 0.55, "2025-08-20T10:00:00Z", 600),
    _resource("res_a1c_guideline", "ADA Standards of Care Summary", "general", ResourceType.CLINICAL_RESOURCES,
              None, 2.1, "2025-06-02T10:00:00Z", 445),
    _resource("res_oc_screening", "Hormonal Contraception Self-Screening", "oc", ResourceType.DOCUMENTATION_FORMS,
              "Screening", 0.3, "2025-07-14T10:00:00Z", 280),
    _resource("res_general_marketing", "In-Store Marketing Kit", "general", ResourceType.ADDITIONAL_RESOURCES,
              None, 5.75, "2025-05-19T10:00:00Z", 95),
]

QUICK_ACCESS = [
    QuickAccessItem(id="qa_enroll", title="Patient Enrollment Form", subtitle="TimeMyMeds",
                    icon="FileText", cta="Download", resource_id="res_tmm_enroll"),
    QuickAccessItem(id="qa_cmr", title="CMR Template", subtitle="MTM The Future Today",
                    icon="ClipboardList", cta="Download", resource_id="res_mtm_cmr"),
    QuickAccessItem(id="qa_training", title="Appointment-Based Model", subtitle="Training video",
                    icon="PlayCircle", cta="Watch", resource_id="res_tmm_training"),
]

ANNOUNCEMENTS = [
    Announcement(id="ann_webinar", title="Monthly Office Hours",
                 body="Join our clinical team for live Q&A on the first Thursday of each month.",
                 date_iso="2026-01-08T17:00:00Z", type="webinar"),
    Announcement(id="ann_update", title="Updated MTM Billing Guide",
                 body="The billing quick reference now covers the 2026 CPT code changes.",
                 date_iso="2026-01-02T12:00:00Z", type="update"),
    Announcement(id="ann_regulatory", title="State Test-and-Treat Rules",
                 body="Several states expanded pharmacist test-and-treat authority this year.",
                 date_iso="2025-12-15T12:00:00Z", type="regulatory"),
]

RECENT_ACTIVITY = [
    RecentActivity(id="act_1", resource_id="res_tmm_enroll", name="Patient Enrollment Form",
                   program="tmm", accessed_at_iso="2026-01-05T13:40:00Z"),
    RecentActivity(id="act_2", resource_id="res_a1c_handout", name="Understanding Your A1c",
                   program="general", accessed_at_iso="2026-01-04T09:15:00Z"),
]
