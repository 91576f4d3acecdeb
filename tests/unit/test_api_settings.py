"""
Unit tests for the settings endpoints (partnerdb/api/settings.py).
"""

import pytest
from unittest.mock import patch

from fastapi.testclient import TestClient

from partnerdb.api.main import app
from partnerdb.errors import DuplicateValueError, NotFoundError
from partnerdb.models import VocabularyType


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def settings_store():
    with patch('partnerdb.api.settings.settings_store') as mock_store:
        yield mock_store


@pytest.fixture
def propagator():
    with patch('partnerdb.api.settings.rename_propagator') as mock_propagator:
        yield mock_propagator


# ---------------------------------------------------------------------------
# Lists
# ---------------------------------------------------------------------------

@pytest.mark.parametrize('slug, vocabulary', [
    ('departments', VocabularyType.DEPARTMENT),
    ('industries', VocabularyType.INDUSTRY),
    ('outsource-types', VocabularyType.OUTSOURCE_TYPE),
])
def test_list_each_vocabulary(client, settings_store, slug, vocabulary):
    settings_store.list_values.return_value = ['a', 'b']
    resp = client.get(f'/api/settings/{slug}')
    assert resp.json() == {'success': True, 'data': ['a', 'b']}
    settings_store.list_values.assert_called_once_with(vocabulary)


def test_unknown_list_is_404(client, settings_store):
    resp = client.get('/api/settings/colours')
    assert resp.status_code == 404
    assert resp.json() == {'success': False, 'error': 'Unknown settings list: colours'}


def test_add_value_returns_updated_list(client, settings_store):
    settings_store.add_value.return_value = ['총무팀', '품질팀']
    resp = client.post('/api/settings/departments', json={'name': '품질팀'})
    assert resp.status_code == 201
    assert resp.json() == {'success': True, 'data': ['총무팀', '품질팀']}
    settings_store.add_value.assert_called_once_with(VocabularyType.DEPARTMENT, '품질팀')


def test_add_duplicate_is_409(client, settings_store):
    settings_store.add_value.side_effect = DuplicateValueError("department '총무팀' already exists")
    resp = client.post('/api/settings/departments', json={'name': '총무팀'})
    assert resp.status_code == 409
    assert resp.json()['success'] is False


def test_add_without_name_is_400(client, settings_store):
    resp = client.post('/api/settings/industries', json={})
    assert resp.status_code == 400
    settings_store.add_value.assert_not_called()


# ---------------------------------------------------------------------------
# Rename
# ---------------------------------------------------------------------------

def test_rename_department(client, propagator):
    propagator.rename_value.return_value = 2
    resp = client.put('/api/settings/rename', json={'type': 'DEPT', 'oldName': '영업팀', 'newName': '세일즈팀'})
    assert resp.status_code == 200
    assert resp.json() == {'success': True, 'data': {'affected': 2}}
    propagator.rename_value.assert_called_once_with(VocabularyType.DEPARTMENT, '영업팀', '세일즈팀')


@pytest.mark.parametrize('raw_type, vocabulary', [
    ('INDUSTRY', VocabularyType.INDUSTRY),
    ('OUTSOURCE', VocabularyType.OUTSOURCE_TYPE),
    ('outsource-types', VocabularyType.OUTSOURCE_TYPE),
])
def test_rename_type_aliases(client, propagator, raw_type, vocabulary):
    propagator.rename_value.return_value = 0
    client.put('/api/settings/rename', json={'type': raw_type, 'oldName': 'a', 'newName': 'b'})
    assert propagator.rename_value.call_args[0][0] is vocabulary


def test_rename_unknown_type_is_400(client, propagator):
    resp = client.put('/api/settings/rename', json={'type': 'CATEGORY', 'oldName': 'a', 'newName': 'b'})
    assert resp.status_code == 400
    propagator.rename_value.assert_not_called()


def test_rename_missing_fields_is_400(client, propagator):
    resp = client.put('/api/settings/rename', json={'type': 'DEPT', 'oldName': 'a'})
    assert resp.status_code == 400
    assert 'newName' in resp.json()['error']


def test_rename_unknown_old_value_is_404(client, propagator):
    propagator.rename_value.side_effect = NotFoundError("department '마법팀' not found")
    resp = client.put('/api/settings/rename', json={'type': 'DEPT', 'oldName': '마법팀', 'newName': 'x'})
    assert resp.status_code == 404


def test_rename_to_existing_is_409(client, propagator):
    propagator.rename_value.side_effect = DuplicateValueError("department '디자인팀' already exists")
    resp = client.put('/api/settings/rename', json={'type': 'DEPT', 'oldName': '영업팀', 'newName': '디자인팀'})
    assert resp.status_code == 409
