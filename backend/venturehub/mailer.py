"""Outbound e-mail.

No relay is configured: messages are written to the `venturehub.mail`
logger so operators can see what would have been delivered.
"""

import logging

logger = logging.getLogger("venturehub.mail")

SUBJECTS = {
    "signup": "Confirm your VentureHub account",
    "recovery": "Reset your VentureHub password",
}


def send_verification_code(email: str, code: str, purpose: str = "signup") -> None:
    subject = SUBJECTS.get(purpose, "Your VentureHub code")
    logger.info("mail to=%s subject=%r code=%s", email, subject, code)


def send_invitation(email: str, link: str, kind: str = "user") -> None:
    logger.info("mail to=%s subject=%r link=%s", email, f"You're invited to VentureHub ({kind})", link)
