"""ClassHub Backend.

Classroom-management service: teachers organize classes, units and
assignments; students enroll, submit work, and receive grades and
notifications.

Copyright (C) 2025 Global Digital Labs (gdlabs.io)
SPDX-License-Identifier: LGPL-3.0-or-later
"""

__version__ = "1.0.0"
