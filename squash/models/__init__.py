"""SquashAnalyzer data models — Pydantic schemas and closed enumerations."""

from squash.models.player import *
from squash.models.court import *
from squash.models.shot import *
from squash.models.rally import *
from squash.models.advice import *
