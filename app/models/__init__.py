# Car rental marketplace — Database Models
# Import all models here for SQLAlchemy discovery

from app.models.user import User                        # noqa
from app.models.agent import Agent                      # noqa
from app.models.agent_document import AgentDocument     # noqa
from app.models.car import Car                          # noqa
from app.models.rental import Rental                    # noqa
from app.models.review import Review                    # noqa
from app.models.notification import Notification        # noqa
