"""FastAPI application that turns an uploaded roster into assignments.

###############################################################################
# package:  secret-child                                                      #
###############################################################################

"""
import logging
import random
from typing import Optional

from fastapi import FastAPI, File, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from secret_child import normalize, settings
from secret_child.main import InputError, generate

logger = logging.getLogger(__name__)

GENERIC_ERROR = "An error occurred during assignment."
MISSING_FILE_ERROR = "Employees CSV file is required."

app = FastAPI(
    title="Secret Santa Assignment Generator",
    description="Random secret santa draws that avoid last year's pairs",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,  # Must be False when allow_origins is "*"
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition"],
)


@app.get("/")
def root():
    """Point callers at the interactive docs."""
    return {"message": "Secret Santa Assignment Generator API",
            "docs": "/docs"}


@app.post("/api/secret-santa/assign")
def assign(
    employeesFile: Optional[UploadFile] = File(None),
    previousAssignmentsFile: Optional[UploadFile] = File(None),
):
    """Draw assignments for the uploaded employees csv.

    The optional previous assignments csv keeps anyone from drawing the
    same person as last time. Responds with the assignments as a csv
    attachment.
    """
    if employeesFile is None:
        return JSONResponse({"error": MISSING_FILE_ERROR}, status_code=400)

    try:
        participants = normalize.read_participants(employeesFile.file.read())
        prior = {}
        if previousAssignmentsFile is not None:
            prior = normalize.read_prior_assignments(
                previousAssignmentsFile.file.read())

        assignment_set = generate(participants, prior,
                                  rng=random.SystemRandom())
    except InputError as exc:
        logger.info("Rejected upload: %s", exc)
        return JSONResponse({"error": str(exc)}, status_code=400)
    except Exception:
        logger.exception("Assignment failed")
        return JSONResponse({"error": GENERIC_ERROR}, status_code=500)

    disposition = f'attachment; filename="{settings.OUTPUT_FILENAME}"'
    return Response(
        content=normalize.assignments_to_csv(assignment_set),
        media_type="text/csv",
        headers={"Content-Disposition": disposition},
    )


def run():
    """Serve the app with uvicorn on the configured host and port."""
    import uvicorn

    logging.basicConfig(level=settings.LOG_LEVEL)
    logger.info("Server running on port %d", settings.PORT)
    uvicorn.run(app, host=settings.HOST, port=settings.PORT, workers=1)


if __name__ == "__main__":
    run()
