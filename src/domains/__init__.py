# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Domain services layer for ClassHub.

This package contains domain services that encapsulate business logic.
Each service owns one kind of record, validates its lifecycle rules,
commits, and then emits notifications.

Domains:
    auth: Caller identity resolution.
    class_: Class catalog, units and cascading class deletion.
    enrollment: Student membership in classes.
    assignment: Assignment publication and missing-submission reports.
    submission: Student work and grading.
    notification: Notification inbox.
    discussion: Class boards and submission feedback threads.
"""
