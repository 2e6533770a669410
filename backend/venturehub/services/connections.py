"""Investor interest and info requests on startups."""

import logging
from typing import Dict, List, Optional

from sqlmodel import Session

from .. import models, repositories
from ..errors import ConflictError, NotFoundError, ValidationFailed
from .investors import investor_basic
from .notifications import NotificationService
from .startups import startup_basic

logger = logging.getLogger("venturehub.connections")

CONNECTION_TYPES = ("interested", "info_request")
CONNECTION_STATUSES = ("active", "archived")


def connection_to_dict(c: models.InvestorStartupConnection) -> dict:
    return {
        "id": c.id,
        "investor_id": c.investor_id,
        "startup_id": c.startup_id,
        "connection_type": c.connection_type,
        "investor_name": c.investor_name,
        "investor_email": c.investor_email,
        "investor_calendly_link": c.investor_calendly_link,
        "startup_name": c.startup_name,
        "startup_email": c.startup_email,
        "message": c.message,
        "status": c.status,
        "created_at": c.created_at,
        "updated_at": c.updated_at,
    }


class ConnectionService:
    def __init__(self, session: Session):
        self.session = session
        self.connections = repositories.ConnectionRepository(session)
        self.startups = repositories.StartupRepository(session)
        self.investors = repositories.InvestorRepository(session)
        self.notifications = NotificationService(session)

    def create_connection(self, investor: models.Investor, startup_id: str, connection_type: str,
                          message: Optional[str] = None) -> dict:
        """Record an investor's interest or info request and notify the right people.

        The investor's and startup's names and emails are copied onto the
        row. `interested` notifies the startup and every admin;
        `info_request` is only seen by admins.
        """
        if connection_type not in CONNECTION_TYPES:
            raise ValidationFailed(f"Unknown connection type: {connection_type}")
        startup = self.startups.get(startup_id)
        if not startup:
            raise NotFoundError("Startup not found")
        if self.connections.find(investor.id, startup.id, connection_type):
            raise ConflictError("Connection already exists")

        connection = self.connections.create(models.InvestorStartupConnection(
            investor_id=investor.id,
            startup_id=startup.id,
            connection_type=connection_type,
            investor_name=investor.name,
            investor_email=investor.email,
            investor_calendly_link=investor.calendly_link,
            startup_name=startup.startup_name or startup.name,
            startup_email=startup.email,
            message=message,
            status="active",
        ))
        logger.info("connection %s type=%s investor=%s startup=%s",
                    connection.id, connection_type, investor.id, startup.id)

        if connection_type == "interested":
            self._notify_startup_of_interest(connection)
            self._notify_admins_of_interest(connection)
        else:
            self._notify_admins_of_info_request(connection)
        return connection_to_dict(connection)

    def _notify_startup_of_interest(self, c: models.InvestorStartupConnection) -> None:
        calendly = ""
        if c.investor_calendly_link:
            calendly = f"\n\nConnect with {c.investor_name}: {c.investor_calendly_link}"
        try:
            self.notifications.create_notification({
                "user_id": c.startup_id,
                "type": "investment_interest",
                "title": "New Investor Interest!",
                "content": f'{c.investor_name} has shown interest in your startup "{c.startup_name}".{calendly}',
                "priority": "high",
                "metadata": {
                    "investor_id": c.investor_id,
                    "investor_name": c.investor_name,
                    "investor_email": c.investor_email,
                    "investor_calendly_link": c.investor_calendly_link,
                    "connection_id": c.id,
                },
            })
        except Exception:
            logger.exception("failed to notify startup %s of interest", c.startup_id)
            self.session.rollback()

    def _notify_admins(self, c: models.InvestorStartupConnection, data: Dict) -> None:
        try:
            admin_ids = self.notifications.admin_ids()
            if admin_ids:
                self.notifications.send_bulk_notifications(admin_ids, data)
        except Exception:
            logger.exception("failed to notify admins of connection %s", c.id)
            self.session.rollback()

    def _notify_admins_of_interest(self, c: models.InvestorStartupConnection) -> None:
        self._notify_admins(c, {
            "type": "investment_interest",
            "title": "New Investor Interest",
            "content": f'{c.investor_name} has shown interest in "{c.startup_name}"',
            "priority": "normal",
            "metadata": {
                "connection_id": c.id,
                "investor_id": c.investor_id,
                "startup_id": c.startup_id,
                "connection_type": c.connection_type,
            },
        })

    def _notify_admins_of_info_request(self, c: models.InvestorStartupConnection) -> None:
        message = f'\n\nMessage: "{c.message}"' if c.message else ""
        self._notify_admins(c, {
            "type": "admin_action",
            "title": "Info Request from Investor",
            "content": f'{c.investor_name} has requested more information about "{c.startup_name}"{message}',
            "priority": "normal",
            "metadata": {
                "connection_id": c.id,
                "investor_id": c.investor_id,
                "startup_id": c.startup_id,
                "connection_type": c.connection_type,
                "message": c.message,
            },
        })

    def get_connection(self, investor_id: str, startup_id: str, connection_type: str) -> Optional[dict]:
        c = self.connections.find(investor_id, startup_id, connection_type)
        return connection_to_dict(c) if c else None

    def get_connections(self, filters: Optional[Dict] = None) -> List[dict]:
        filters = filters or {}
        conditions = [models.InvestorStartupConnection.status == (filters.get("status") or "active")]
        for key in ("investor_id", "startup_id", "connection_type"):
            if filters.get(key):
                conditions.append(getattr(models.InvestorStartupConnection, key) == filters[key])
        return [connection_to_dict(c) for c in self.connections.list(*conditions)]

    def has_shown_interest(self, investor_id: str, startup_id: str) -> bool:
        return self.connections.find(investor_id, startup_id, "interested") is not None

    def archive_connection(self, connection_id: str) -> dict:
        c = self.connections.get(connection_id)
        if not c:
            raise NotFoundError("Connection not found")
        c.status = "archived"
        return connection_to_dict(self.connections.save(c))

    def get_interested_startups(self, investor_id: str) -> List[dict]:
        """Startups the investor has shown interest in, with the connection row."""
        out = []
        for c in self.get_connections({"investor_id": investor_id, "connection_type": "interested"}):
            startup = self.startups.get(c["startup_id"])
            if startup:
                out.append({**c, "startup": startup_basic(startup)})
        return out

    def get_interested_investors(self, startup_id: str) -> List[dict]:
        out = []
        for c in self.get_connections({"startup_id": startup_id, "connection_type": "interested"}):
            investor = self.investors.get(c["investor_id"])
            if investor:
                out.append({**c, "investor": investor_basic(investor)})
        return out
