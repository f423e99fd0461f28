"""Secret Santa assignments that never repeat last year's draw.

###############################################################################
# package:  secret-child                                                      #
###############################################################################

"""

from __future__ import annotations
from dataclasses import dataclass
from argparse import ArgumentParser
from typing import Iterator, Mapping, Optional, Sequence
from unicodedata import normalize

import logging
import pathlib
import random
import re
import sys

from secret_child import settings


logger = logging.getLogger(__name__)

###############################################################################
# exceptions                                                                  #
###############################################################################


class SecretChildError(Exception):
    """Base package exception from which others inherit."""


class GenerationFailed(SecretChildError):
    """Raised if no valid assignment is found within the attempt ceiling.

    Attributes
    ----------
    attempts : int
        How many random permutations were tried before giving up.
    participants : int
        How many participants were being assigned.
    """

    def __init__(self, attempts: int, participants: int) -> None:
        self.attempts = attempts
        self.participants = participants
        super().__init__(
            f"Unable to generate valid assignments for {participants} "
            f"participant(s) after {attempts} attempt(s)"
        )


class InputError(SecretChildError, ValueError):
    """Raised if uploaded roster or history data is malformed."""

###############################################################################
# main classes                                                                #
###############################################################################


@dataclass(frozen=True)
class Participant:
    """A person who gives exactly one gift and receives exactly one gift.

    Attributes
    ----------
    name : str
        The participant's display name.
    email : str
        The participant's email, their unique identifier.
    """
    name: str
    email: str

    def __str__(self) -> str:
        return f"{self.name} <{self.email}>"


@dataclass(frozen=True)
class Assignment:
    """A giver and the secret child they buy a gift for."""
    giver: Participant
    receiver: Participant

    def __str__(self) -> str:
        return f'{self.__class__.__name__}({self.giver} -> {self.receiver})'


@dataclass(frozen=True)
class AssignmentSet:
    """An ordered, complete draw: one assignment per participant.

    Givers appear in the order the participants were supplied. The set is
    never mutated once the generator hands it back.

    Attributes
    ----------
    assignments : tuple[Assignment, ...]
        The assignments in giver order.
    """
    assignments: tuple[Assignment, ...]

    def __iter__(self) -> Iterator[Assignment]:
        return iter(self.assignments)

    def __len__(self) -> int:
        return len(self.assignments)

    def __getitem__(self, index: int) -> Assignment:
        return self.assignments[index]

    @ property
    def givers(self) -> list[Participant]:
        """Return the givers in order.

        Returns
        -------
        list[Participant]
        """
        return [a.giver for a in self.assignments]

    @ property
    def receivers(self) -> list[Participant]:
        """Return the receivers, aligned with `givers`.

        Returns
        -------
        list[Participant]
        """
        return [a.receiver for a in self.assignments]

    def to_mapping(self) -> dict[str, str]:
        """Return giver email -> receiver email.

        This is the shape `generate` accepts as its prior mapping, so this
        year's draw can constrain next year's.

        Returns
        -------
        dict[str, str]
        """
        return {a.giver.email: a.receiver.email for a in self.assignments}

    def is_valid(self, prior: Optional[Mapping[str, str]] = None) -> bool:
        """Re-check the draw against both constraints and the bijection.

        Parameters
        ----------
        prior : Mapping[str, str], optional
            The previous round's giver email -> receiver email.

        Returns
        -------
        bool
            True if nobody gives to themselves, nobody repeats their prior
            pairing and every giver is also exactly one receiver.
        """
        giver_emails = sorted(p.email for p in self.givers)
        receiver_emails = sorted(p.email for p in self.receivers)
        if giver_emails != receiver_emails:
            return False
        if len(set(giver_emails)) != len(giver_emails):
            return False

        return first_violation(
            self.givers, self.receivers, prior or {}) is None

    def __str__(self) -> str:
        s = f"{self.__class__.__name__}({', '.join(map(str, self))})"
        return s

###############################################################################
# assignment generation                                                       #
###############################################################################


def shuffle(items: Sequence, rng: random.Random) -> list:
    """Return a uniformly shuffled copy of items (Fisher-Yates).

    Parameters
    ----------
    items : Sequence
        The items to shuffle; left untouched.
    rng : random.Random
        Anything with a `randint(a, b)` inclusive of both ends.

    Returns
    -------
    list
    """
    shuffled = list(items)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randint(0, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]

    return shuffled


def pair_is_valid(giver: Participant, receiver: Participant,
                  prior: Mapping[str, str]) -> bool:
    """Return if giver may be assigned receiver."""
    if giver.email == receiver.email:
        return False

    # empty history entries impose nothing
    previous = prior.get(giver.email)
    if previous and previous == receiver.email:
        return False

    return True


def first_violation(givers: Sequence[Participant],
                    receivers: Sequence[Participant],
                    prior: Mapping[str, str]) -> Optional[int]:
    """Return the index of the first invalid pair, or None if all are valid.

    Stops at the first violation; no repair is attempted.
    """
    for idx, (giver, receiver) in enumerate(zip(givers, receivers)):
        if not pair_is_valid(giver, receiver, prior):
            return idx

    return None


def generate(participants: Sequence[Participant],
             prior: Optional[Mapping[str, str]] = None,
             rng: Optional[random.Random] = None,
             max_attempts: int = settings.MAX_ATTEMPTS) -> AssignmentSet:
    """Draw a random assignment by bounded rejection sampling.

    Each attempt shuffles the receivers, pairs them position by position with
    the participants in their original order, and keeps the result only if
    every pair passes `pair_is_valid`.

    Parameters
    ----------
    participants : Sequence[Participant]
        The roster, with unique emails. Its order is the giver order of the
        result.
    prior : Mapping[str, str], optional
        Last round's giver email -> receiver email. Defaults to no history.
    rng : random.Random, optional
        Source of randomness. A fresh `random.Random()` is made per call if
        omitted, so concurrent calls never share one.
    max_attempts : int
        The attempt ceiling, defaults to `settings.MAX_ATTEMPTS`.

    Returns
    -------
    AssignmentSet

    Raises
    ------
    GenerationFailed
        If fewer than two participants are given, or no valid permutation is
        found within max_attempts.
    ValueError
        If max_attempts is not positive.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be a positive integer.")

    givers = list(participants)
    prior = prior or {}
    rng = rng if rng is not None else random.Random()

    # a lone participant can only draw themselves
    if len(givers) < settings.MIN_PARTICIPANTS:
        logger.warning("Cannot assign %d participant(s)", len(givers))
        raise GenerationFailed(attempts=0, participants=len(givers))

    for attempt in range(1, max_attempts + 1):
        receivers = shuffle(givers, rng)
        bad_idx = first_violation(givers, receivers, prior)

        if bad_idx is None:
            logger.info("Assigned %d participants in %d attempt(s)",
                        len(givers), attempt)
            return AssignmentSet(tuple(
                Assignment(giver, receiver)
                for giver, receiver in zip(givers, receivers)
            ))

        logger.debug("Attempt %d rejected at giver %s",
                     attempt, givers[bad_idx].email)

    logger.warning("Gave up on %d participants after %d attempts",
                   len(givers), max_attempts)
    raise GenerationFailed(attempts=max_attempts, participants=len(givers))

###############################################################################
# helper functions & execution                                                #
###############################################################################


def slugify(val, allow_unicode=False) -> str:
    """Sanitize a value and return its string.

    Convert to ASCII if 'allow_unicode' is False. Convert spaces or repeated
    dashes to single dashes. Remove characters that aren't alphanumerics,
    underscores, or hyphens. Convert to lowercase. Also strip leading and
    trailing whitespace, dashes, and underscores.


    This procedure was Taken from:
    https://github.com/django/django/blob/master/django/utils/text.py

    """
    val = str(val)
    if allow_unicode:
        val = normalize('NFKC', val)
    else:
        val = normalize('NFKD', val)
        val = val.encode('ascii', 'ignore').decode('ascii')

    val = re.sub(r'[^\w\s-]', '', val.lower())
    val = re.sub(r'[-\s]+', '-', val).strip('-_')
    return val


def build_parser() -> ArgumentParser:
    """Return the command line parser."""
    parser = ArgumentParser(
        prog='secret-child',
        description="Draw secret santa assignments from an employee roster.",
        epilog="""Example: secret-child employees.csv -p last_year.csv
        -o assignments.csv --log -label office-2026
        """
    )

    parser.add_argument('file', type=str,
                        help="""Employees csv with Employee_Name and
                        Employee_EmailID columns, looked up in ./input if
                        not found as given.
                        """)
    parser.add_argument('-previous', '-p', type=str, default=None,
                        help="""Last year's assignments csv with
                        Employee_EmailID and Secret_Child_EmailID columns.
                        """)
    parser.add_argument('-output', '-o', type=str, default=None,
                        help="""Where to write the assignments csv. Defaults
                        to stdout.
                        """)
    parser.add_argument('-label', '-l', type=str, default='',
                        help="""A label to append to logs.
                        """)
    parser.add_argument('--seed', type=int, default=None,
                        help="""Seed the draw for a reproducible result.""")
    parser.add_argument('--attempts', type=int,
                        default=settings.MAX_ATTEMPTS,
                        help=f"""How many random draws to try before giving
                        up? Default is {settings.MAX_ATTEMPTS}.
                        """)
    parser.add_argument('--log', action='store_true',
                        help="""Also write the assignments to a sub-directory
                        of the output directory.
                        """)
    parser.add_argument('--verbose', '-v', action='store_true',
                        help="""Write the assignments to the console.""")
    return parser


def resolve_input(filename: str) -> pathlib.Path:
    """Find an input csv, falling back to the input directory.

    Parameters
    ----------
    filename : str
        A path, or a file name inside `settings.INPUT_DIR`.

    Returns
    -------
    pathlib.Path

    Raises
    ------
    InputError
        If the file exists in neither place or isn't a csv.
    """
    filepath = pathlib.Path(filename)
    if not filepath.exists():
        filepath = settings.INPUT_DIR.joinpath(filename)

    if not filepath.is_file():
        raise InputError(f"The file: {filename} does not exist in this "
                         f"directory or in {settings.INPUT_DIR}.")
    if filepath.suffix.lower() not in settings.INPUT_FILETYPES:
        raise InputError(f"The file: {filename} is not a csv.")

    return filepath


def cli(argv: Optional[Sequence[str]] = None) -> int:
    """Run secret santa logic from the command line.

    Returns
    -------
    int
        The process exit code.
    """
    from secret_child import normalize as csv_io

    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else settings.LOG_LEVEL)

    try:
        participants = csv_io.read_participants(resolve_input(args.file))
        prior = {}
        if args.previous:
            prior = csv_io.read_prior_assignments(
                resolve_input(args.previous))
        rng = random.Random(args.seed)
        assignment_set = generate(participants, prior, rng=rng,
                                  max_attempts=args.attempts)
    except (InputError, GenerationFailed) as exc:
        logger.error("%s", exc)
        return 1

    if args.verbose:
        for assignment in assignment_set:
            logger.info("%s", assignment)

    text = csv_io.assignments_to_csv(assignment_set)

    try:
        # log copy first so a label clash writes nothing
        if args.log:
            dir_stem = slugify(settings.COLUMN_JOIN_CHAR.join(
                [str(settings.TIMESTAMP), args.label]))
            out_subdir = settings.OUTPUT_DIR.joinpath(dir_stem)
            out_subdir.mkdir(parents=True, exist_ok=False)
            out_filepath = out_subdir.joinpath(settings.OUTPUT_FILENAME)

            with open(out_filepath, 'w', encoding='UTF-8', newline='') as wfp:
                wfp.write(text)
            logger.info("Wrote %s", out_filepath)

        if args.output:
            with open(args.output, 'w', encoding='UTF-8', newline='') as wfp:
                wfp.write(text)
        else:
            sys.stdout.write(text)
    except OSError as exc:
        logger.error("Could not write assignments: %s", exc)
        return 1

    return 0


if __name__ == '__main__':
    sys.exit(cli())
