"""
Event Bus Topics

Hierarchical "<namespace>.<event>" names. The realtime gateway strips the
namespace, so subscribers of "incidents.*" see {"type": "escalated", ...}.
"""

EVENTS_NAMESPACE = "events"
INCIDENTS_NAMESPACE = "incidents"

EVENT_CREATED = "events.created"
EVENT_UPDATED = "events.updated"
EVENT_STATUS_CHANGED = "events.status_changed"
EVENT_REMOVED = "events.removed"

INCIDENT_CREATED = "incidents.created"
INCIDENT_UPDATED = "incidents.updated"
INCIDENT_STATUS_CHANGED = "incidents.status_changed"
INCIDENT_ASSIGNED = "incidents.assigned"
INCIDENT_ESCALATED = "incidents.escalated"
INCIDENT_REMOVED = "incidents.removed"


def event_name(topic: str) -> str:
    """Topic without its namespace prefix"""
    return topic.split(".", 1)[1] if "." in topic else topic
