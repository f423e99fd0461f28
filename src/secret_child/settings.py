"""Settings for secret-child.

###############################################################################
# package:  secret-child                                                      #
###############################################################################

"""

import os
import pathlib
from datetime import datetime, timezone

from dotenv import load_dotenv

load_dotenv()

INPUT_DIR = pathlib.Path.cwd().joinpath("input")
OUTPUT_DIR = pathlib.Path.cwd().joinpath("output")
FILETYPE_EXT = '.csv'
INPUT_FILETYPES = ['.csv']
CSV_SEP = ','

TIMESTAMP = int(datetime.now(timezone.utc).timestamp())

NAME_COLUMN = 'Employee_Name'
EMAIL_COLUMN = 'Employee_EmailID'
CHILD_NAME_COLUMN = 'Secret_Child_Name'
CHILD_EMAIL_COLUMN = 'Secret_Child_EmailID'
OUTPUT_COLUMNS = [NAME_COLUMN, EMAIL_COLUMN,
                  CHILD_NAME_COLUMN, CHILD_EMAIL_COLUMN]
OUTPUT_FILENAME = 'secret_santa_assignments' + FILETYPE_EXT
COLUMN_JOIN_CHAR = '-'

MIN_PARTICIPANTS = 2
MAX_ATTEMPTS = int(os.getenv('MAX_ATTEMPTS', '1000'))

HOST = os.getenv('HOST', '0.0.0.0')
PORT = int(os.getenv('PORT', '5000'))
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()
