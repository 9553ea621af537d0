# gate_register/services/seed.py
"""Sample profiles written on the very first start of an empty register."""

from gate_register.schemas.profile import ProfileCreate
from gate_register.utils.logger import get_logger

logger = get_logger(__name__)

SAMPLE_PROFILES = [
    ProfileCreate(profile_type="Individual", name="John Doe", identifier="08123456789",
                  notes="Regular visitor"),
    ProfileCreate(profile_type="Vehicle", name="Toyota Camry", identifier="ABC-123",
                  notes="Staff vehicle"),
    ProfileCreate(profile_type="Vehicle", name="Honda Accord", identifier="XYZ-789",
                  notes="Visitor vehicle"),
]


def seed_sample_profiles(registry) -> int:
    """Create the sample profiles through the registry. Returns how many were created."""
    created = 0
    for form in SAMPLE_PROFILES:
        result = registry.create_profile(form)
        if result.success:
            created += 1
        else:
            logger.warning(f"[store] Sample profile '{form.name}' not seeded: {result.error}")
    logger.info(f"[store] Seeded {created} sample profiles")
    return created
