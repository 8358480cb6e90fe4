import os
import tempfile

# must be set before gridlogic.core.config is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("LOG_FILE", os.path.join(tempfile.gettempdir(), "gridlogic_test_errors.log"))

import pytest
from fastapi.testclient import TestClient

from gridlogic.core.config import settings
from gridlogic.core.database import Base, SessionLocal, engine
from gridlogic.engine.grid import Cell, Grid, Position
from gridlogic.engine.template import LogicTemplate
from gridlogic.schemas.template_schema import TemplateDefinition
from gridlogic.services.template_services import load_definitions


PINK = "#ff82a9"
GREEN = "#7ed957"


def make_cell(shape="circle", color=PINK, number=1, row=0, col=0):
    return Cell(shape=shape, color=color, number=number, position=Position(row=row, col=col))


def make_grid(shape="square", color=GREEN, number=5, size=5):
    """Uniform grid, every cell identical apart from its position"""
    cells = [make_cell(shape, color, number, index // size, index % size) for index in range(size * size)]
    return Grid(cells, size)


def make_template(data: dict) -> LogicTemplate:
    return LogicTemplate(TemplateDefinition.model_validate(data))


@pytest.fixture(scope="session")
def template_bank():
    return load_definitions(settings.TEMPLATES_PATH)


@pytest.fixture
def db_session():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    yield db
    db.close()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db_session):
    from gridlogic.main import app

    with TestClient(app) as test_client:
        yield test_client
