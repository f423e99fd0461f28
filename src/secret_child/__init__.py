"""Secret Santa assignments that never repeat last year's draw."""

from secret_child.main import (
    Assignment,
    AssignmentSet,
    GenerationFailed,
    InputError,
    Participant,
    SecretChildError,
    generate,
)
from secret_child.normalize import (
    assignments_to_csv,
    read_participants,
    read_prior_assignments,
)

__all__ = [
    'Assignment',
    'AssignmentSet',
    'GenerationFailed',
    'InputError',
    'Participant',
    'SecretChildError',
    'assignments_to_csv',
    'generate',
    'read_participants',
    'read_prior_assignments',
]
