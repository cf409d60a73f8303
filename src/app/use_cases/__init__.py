"""
Use Cases

Organized into domain folders:
- auth/: Registration and login
- events/: Event lifecycle and history
- incidents/: Incident reporting, assignment, escalation
- notifications/: Recipient-side notification operations
- maintenance/: Retention jobs

Import from subdirectories.
"""
