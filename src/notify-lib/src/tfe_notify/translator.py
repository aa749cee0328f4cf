"""
tfe_notify.translator — TFE notification payload → Teams MessageCard.

to_message_card() is pure: the same payload always yields the same card.
Only the first notification entry is rendered.

Card layout:
    title / summary   "<message> in <workspace>." (or "<message>")
    text              run_message
    themeColor        colour of the trigger, "" if unknown
    section           activityTitle=run_updated_by,
                      activitySubtitle=run_updated_at,
                      facts=[Organisation, Run ID, Run Created By, Run Created At]
    potentialAction   OpenUri "View Run" → run_url
"""

from __future__ import annotations

from datetime import datetime

from aws_lambda_powertools import Logger

from tfe_notify.exceptions import EmptyNotificationsError, UnsupportedPayloadVersionError
from tfe_notify.models import (
    SUPPORTED_PAYLOAD_VERSION,
    TRIGGER_COLOURS,
    Fact,
    MessageCard,
    NotificationPayload,
    PotentialAction,
    Section,
)

logger = Logger(service="tfe-notify")

TIMESTAMP_FORMAT = "%d/%m/%Y %H:%M:%S"


def format_timestamp(value: datetime) -> str:
    """DD/MM/YYYY HH:MM:SS in the timestamp's own offset."""
    return value.strftime(TIMESTAMP_FORMAT)


def check_payload_version(payload: NotificationPayload) -> None:
    if payload.payload_version != SUPPORTED_PAYLOAD_VERSION:
        raise UnsupportedPayloadVersionError(payload.payload_version)
    if not payload.notifications:
        raise EmptyNotificationsError("Payload has no notifications")


def colour_for_trigger(trigger: str) -> str:
    """Theme colour for a trigger; unknown triggers log a warning and get ""."""
    colour = TRIGGER_COLOURS.get(trigger)
    if colour is None:
        logger.warning("Unsupported trigger", extra={"trigger": trigger})
        return ""
    return colour


def build_title(message: str, workspace_name: str) -> str:
    if workspace_name:
        return f"{message} in {workspace_name}."
    return message


def build_facts(payload: NotificationPayload) -> tuple[Fact, ...]:
    facts: list[Fact] = []
    if payload.organization_name:
        facts.append(Fact(name="Organisation", value=payload.organization_name))
    if payload.run_id:
        facts.append(Fact(name="Run ID", value=payload.run_id))
    if payload.run_created_by:
        facts.append(Fact(name="Run Created By", value=payload.run_created_by))
    if payload.run_created_at is not None:
        facts.append(Fact(name="Run Created At", value=format_timestamp(payload.run_created_at)))
    return tuple(facts)


def to_message_card(payload: NotificationPayload) -> MessageCard:
    """Translate a version-checked payload into a MessageCard.

    Callers must run check_payload_version() first; an empty notifications
    list raises EmptyNotificationsError here as well.
    """
    if not payload.notifications:
        raise EmptyNotificationsError("Payload has no notifications")
    notification = payload.notifications[0]

    title = build_title(notification.message, payload.workspace_name)

    section = Section(
        activity_title=notification.run_updated_by,
        activity_subtitle=(
            format_timestamp(notification.run_updated_at)
            if notification.run_updated_at is not None
            else ""
        ),
        facts=build_facts(payload),
    )

    return MessageCard(
        summary=title,
        title=title,
        text=payload.run_message,
        theme_color=colour_for_trigger(notification.trigger),
        sections=(section,),
        potential_actions=(PotentialAction(uri=payload.run_url),),
    )
