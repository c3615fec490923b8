"""Keeps client-side auth state in step with the server session.

Feed it every session update with ``apply``. A session flagged
``needs_profile_completion`` opens the ``complete-profile`` modal; an
authenticated session without the flag closes whatever modal is open.
"""

import logging

logger = logging.getLogger(__name__)

LOADING = 'loading'
AUTHENTICATED = 'authenticated'
UNAUTHENTICATED = 'unauthenticated'

COMPLETE_PROFILE_MODAL = 'complete-profile'


class SessionSynchronizer:

    def __init__(self, client):
        self.client = client
        self.session = None
        self.is_loading = True
        self.is_authenticated = False
        self.modal = None

    @property
    def state(self):
        """One of ``loading``, ``needs_completion``, ``ready``, ``unauthenticated``."""
        if self.is_loading:
            return 'loading'
        if not self.is_authenticated:
            return 'unauthenticated'
        if self.needs_profile_completion:
            return 'needs_completion'
        return 'ready'

    @property
    def needs_profile_completion(self):
        return bool(self.session and self.session.get('needs_profile_completion'))

    def open_modal(self, name):
        self.modal = name

    def close_modal(self):
        self.modal = None

    def apply(self, status, session=None):
        """Record a session update from the auth provider."""
        if status not in (LOADING, AUTHENTICATED, UNAUTHENTICATED):
            raise ValueError(f'Unknown session status: {status}')

        self.is_loading = status == LOADING
        self.is_authenticated = status == AUTHENTICATED
        self.session = session if status == AUTHENTICATED else None

        if self.needs_profile_completion:
            self.open_modal(COMPLETE_PROFILE_MODAL)
        elif self.is_authenticated and self.modal:
            self.close_modal()
        return self.state

    def refresh(self):
        """Pull the current session from the server and apply it."""
        return self.apply(AUTHENTICATED, self.client.get_session())

    def complete_profile(self, name, phone):
        """Submit the missing contact details and clear the completion flag."""
        data = self.client.complete_google_profile(name, phone)
        session = dict(self.session or {})
        session.update(
            name=data['user'].get('name'),
            phone=data['user'].get('phone'),
            is_active=True,
            needs_profile_completion=False,
        )
        logger.info("Profile completed for user %s", data['user'].get('id'))
        self.apply(AUTHENTICATED, session)
        return data
