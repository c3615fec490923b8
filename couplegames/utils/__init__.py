"""Shared utilities for the couple games backend.

Auth decorators live in ``couplegames.utils.auth`` and rental helpers in
``couplegames.utils.rentals``; import them from there.
"""

from couplegames.utils.responses import api_response

__all__ = ['api_response']
