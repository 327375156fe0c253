# scripts/seed_database.py
"""
Load sample catalog entries, users and tickets into the configured database.
Safe to re-run: existing users and catalog rows are left alone.
"""
import logging

from itsm_portal.backend.app import config
from itsm_portal.backend.app.db import SessionLocal, init_db
from itsm_portal.backend.app.logging_config import setup_logging
from itsm_portal.backend.app.services import software as software_service
from itsm_portal.backend.app.services import tickets as ticket_service
from itsm_portal.backend.app.services import users as user_service

logger = logging.getLogger("seed")

SOFTWARE = [
    ("Microsoft Office 365", "2024"),
    ("Adobe Creative Suite", "2024"),
    ("Slack", "4.34.0"),
    ("Zoom", "5.15.0"),
    ("AutoCAD", "2024"),
    ("Visual Studio Code", "1.82.0"),
    ("TeamViewer", "15.44.0"),
    ("VPN Client", "3.4.0"),
    ("Google Chrome", "Latest"),
    ("Mozilla Firefox", "Latest"),
]

EMPLOYEES = [
    ("john.smith", "EMP001"),
    ("sarah.johnson", "EMP002"),
    ("mike.davis", "EMP003"),
    ("lisa.wilson", "EMP004"),
    ("david.brown", "EMP005"),
]

# (username, request type, software name, description, status changes)
TICKETS = [
    (
        "john.smith",
        "Software Installation",
        "Microsoft Office 365",
        "Need Microsoft Office 365 installed on new laptop for accounting department",
        [],
    ),
    (
        "sarah.johnson",
        "License Activation",
        "Adobe Creative Suite",
        "Requesting Adobe Creative Suite license for marketing team member",
        [("In Progress", "Approved by manager, processing license")],
    ),
    (
        "mike.davis",
        "Network Issue",
        "VPN Client",
        "Employee working remotely needs VPN client configured",
        [],
    ),
    (
        "lisa.wilson",
        "License Activation",
        "AutoCAD",
        "Current AutoCAD license expires next month, need renewal",
        [("Pending", "Renewal pending budget approval")],
    ),
    (
        "david.brown",
        "Software Installation",
        "Slack",
        "Need Slack configured for new project team communication",
        [("Completed", "Slack successfully configured and user trained")],
    ),
]


def seed():
    setup_logging()
    init_db()
    db = SessionLocal()
    try:
        summary = software_service.import_software(db, SOFTWARE, source="seed")

        users = {}
        if user_service.get_user_by_username(db, config.ADMIN_USERNAME) is None:
            user_service.create_user(
                db,
                username=config.ADMIN_USERNAME,
                employee_id=config.ADMIN_EMPLOYEE_ID,
                is_admin=True,
                password=config.ADMIN_PASSWORD,
            )
        for username, employee_id in EMPLOYEES:
            user = user_service.get_user_by_username(db, username)
            if user is None:
                user = user_service.create_user(db, username=username, employee_id=employee_id)
            users[username] = user

        if ticket_service.list_tickets(db):
            logger.info("tickets already present, skipping sample tickets")
            return

        catalog = {s.name: s.id for s in software_service.list_software(db)}
        for username, request_type, software_name, description, changes in TICKETS:
            ticket = ticket_service.create_ticket(
                db,
                user_id=users[username].id,
                request_type=request_type,
                software_id=catalog.get(software_name),
                description=description,
            )
            for new_status, note in changes:
                ticket_service.update_ticket_status(db, ticket.id, new_status, note=note)

        logger.info(
            "seeded %d software rows, %d users, %d tickets",
            summary["imported"],
            len(users) + 1,
            len(TICKETS),
        )
    finally:
        db.close()


if __name__ == "__main__":
    seed()
