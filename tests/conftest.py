"""Shared fixtures for the test suite."""

import pytest

from tests.fakes import RecordingBusyIndicator, RecordingNotifier, RecordingView


@pytest.fixture
def busy():
    return RecordingBusyIndicator()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def view():
    return RecordingView()


@pytest.fixture
def api_data():
    return [
        {"id": 1, "nombre": "Ana", "apellido": "Diaz", "fechaNacimiento": "19900101", "dni": 123},
        {"id": 2, "nombre": "Bruno", "apellido": "Alvarez", "fechaNacimiento": "19850615", "paisOrigen": "Chile"},
        {"id": 3, "nombre": "carla", "apellido": "Zapata", "fechaNacimiento": "20000229", "dni": 45},
    ]
