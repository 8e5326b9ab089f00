"""Notifications app package.

Turns booking domain events into member emails. Event handlers registered on
the message bus queue Celery tasks, which render and send the messages.
"""
