# Gate Access Register: database models
# Import all models here for SQLAlchemy discovery

from gate_register.models.profile import Profile                  # noqa
from gate_register.models.access_log import AccessLog             # noqa
from gate_register.models.blacklist_event import BlacklistEvent   # noqa
