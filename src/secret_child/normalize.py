"""Read rosters and history from csv, and write assignments back out.

###############################################################################
# package:  secret-child                                                      #
###############################################################################

"""

from __future__ import annotations
from io import BytesIO
from typing import IO, Union

import logging
import os

import pandas as pd

from secret_child import settings
from secret_child.main import AssignmentSet, InputError, Participant


logger = logging.getLogger(__name__)

CsvSource = Union[str, os.PathLike, bytes, IO]


def _read_frame(source: CsvSource, required: list[str]) -> pd.DataFrame:
    """Read a csv into a frame of stripped strings.

    Parameters
    ----------
    source : str, PathLike, bytes or file-like
        The csv to read.
    required : list[str]
        Columns which must be present.

    Returns
    -------
    pd.DataFrame

    Raises
    ------
    InputError
        If the csv can't be parsed or lacks a required column.
    """
    if isinstance(source, (bytes, bytearray)):
        source = BytesIO(source)

    try:
        df = pd.read_csv(source, sep=settings.CSV_SEP, dtype=str,
                         keep_default_na=False, encoding='utf-8-sig',
                         skipinitialspace=True, index_col=False)
    except pd.errors.EmptyDataError as exc:
        raise InputError("The csv file is empty.") from exc
    except (pd.errors.ParserError, UnicodeDecodeError) as exc:
        raise InputError(f"The csv file could not be read: {exc}") from exc

    df.columns = [str(c).strip() for c in df.columns]
    missing = [c for c in required if c not in df.columns]
    if missing:
        raise InputError(f"Missing column(s): {', '.join(missing)}. "
                         f"Found: {', '.join(df.columns)}.")

    # short rows leave NaN even with keep_default_na off
    df = df[required].fillna('').reset_index(drop=True)
    for col in required:
        df[col] = df[col].str.strip()

    return df


def read_participants(source: CsvSource) -> list[Participant]:
    """Read the employee roster.

    Each row needs an Employee_Name and an Employee_EmailID; any other
    columns are ignored. Emails must be unique since they identify people.

    Parameters
    ----------
    source : str, PathLike, bytes or file-like
        The roster csv.

    Returns
    -------
    list[Participant]
        In file order.

    Raises
    ------
    InputError
        On a missing column, a blank field or a repeated email. Rows are
        numbered from 1 after the header, skipping blank lines.
    """
    df = _read_frame(source, [settings.NAME_COLUMN, settings.EMAIL_COLUMN])
    participants: list[Participant] = []
    seen: set[str] = set()

    for index in df.index.values:
        name = df.loc[index, settings.NAME_COLUMN]
        email = df.loc[index, settings.EMAIL_COLUMN]
        row = index + 1

        if not name or not email:
            raise InputError(
                f"Row {row}: {settings.NAME_COLUMN} and "
                f"{settings.EMAIL_COLUMN} are both required.")
        if email in seen:
            raise InputError(f"Row {row}: duplicate email {email}.")

        seen.add(email)
        participants.append(Participant(name=name, email=email))

    logger.debug("Read %d participants", len(participants))
    return participants


def read_prior_assignments(source: CsvSource) -> dict[str, str]:
    """Read a previous round's assignments as giver email -> receiver email.

    Last year's output file can be passed as is. Rows missing either email
    are skipped; if a giver appears twice the later row wins.
    """
    df = _read_frame(source,
                     [settings.EMAIL_COLUMN, settings.CHILD_EMAIL_COLUMN])
    prior: dict[str, str] = {}

    for giver, receiver in df.itertuples(index=False, name=None):
        if giver and receiver:
            prior[giver] = receiver

    logger.debug("Read %d prior assignments", len(prior))
    return prior


def assignments_to_frame(assignment_set: AssignmentSet) -> pd.DataFrame:
    """Return one row per assignment, in giver order."""
    rows = [
        [a.giver.name, a.giver.email, a.receiver.name, a.receiver.email]
        for a in assignment_set
    ]
    return pd.DataFrame(rows, columns=settings.OUTPUT_COLUMNS)


def assignments_to_csv(assignment_set: AssignmentSet) -> str:
    """Return the assignments as csv text with a header row."""
    df = assignments_to_frame(assignment_set)
    return df.to_csv(sep=settings.CSV_SEP, index=False, lineterminator='\n')
