import pytest

from app.models.models import Document, User


API = '/api/v1'


def _cards(count):
    return [{'front': f'Question {i}', 'back': f'Answer {i}'} for i in range(count)]


@pytest.fixture
def owner(session):
    user = User(username='lin', email='lin@example.com')
    session.add(user)
    session.commit()
    session.refresh(user)
    doc = Document(user_id=user.id, filename='chemistry.pdf')
    session.add(doc)
    session.commit()
    session.refresh(doc)
    return {'user_id': user.id, 'document_id': doc.id}


@pytest.fixture
def stranger(session):
    user = User(username='max', email='max@example.com')
    session.add(user)
    session.commit()
    session.refresh(user)
    return user.id


@pytest.fixture
def created_set(client, owner):
    r = client.post(f'{API}/flashcards/sets', json={
        'user_id': owner['user_id'],
        'document_id': owner['document_id'],
        'title': 'Acids and bases',
        'cards': _cards(20),
    })
    assert r.status_code == 201, r.text
    return r.json()


@pytest.mark.integration
def test_create_set_initializes_reviews(created_set):
    assert created_set['initialized_count'] == 20
    assert len(created_set['cards']) == 20
    assert created_set['title'] == 'Acids and bases'


@pytest.mark.integration
def test_due_then_review_flow(client, owner, created_set):
    set_id = created_set['id']
    user_id = owner['user_id']

    due = client.get(f'{API}/flashcards/sets/{set_id}/due', params={'user_id': user_id})
    assert due.status_code == 200
    body = due.json()
    assert body['total_due'] == 20
    assert body['total_cards'] == 20
    assert set(body['due_cards'][0]) == {'front', 'back', 'card_index', 'review_id', 'times_reviewed'}

    r = client.post(f'{API}/flashcards/sets/{set_id}/review', json={
        'user_id': user_id, 'card_index': 0, 'difficulty': 'good'
    })
    assert r.status_code == 200, r.text
    review = r.json()
    assert review['interval'] == 3
    assert review['ease_factor'] == 2.5
    assert review['times_reviewed'] == 1
    assert review['next_review_date']

    due = client.get(f'{API}/flashcards/sets/{set_id}/due', params={'user_id': user_id}).json()
    assert due['total_due'] == 19
    assert 0 not in [c['card_index'] for c in due['due_cards']]

    stats = client.get(f'{API}/flashcards/sets/{set_id}/stats', params={'user_id': user_id}).json()
    assert stats == {
        'total_cards': 20,
        'due_today': 19,
        'avg_reviews': pytest.approx(0.05),
        'new_cards': 19,
        'learning_cards': 1,
    }


@pytest.mark.integration
def test_initialize_endpoint_is_idempotent(client, owner, created_set):
    set_id = created_set['id']
    client.post(f'{API}/flashcards/sets/{set_id}/review', json={
        'user_id': owner['user_id'], 'card_index': 5, 'difficulty': 'easy'
    })

    r = client.post(f'{API}/flashcards/sets/{set_id}/initialize', json={
        'user_id': owner['user_id'], 'card_count': 20
    })
    assert r.status_code == 200
    assert r.json() == {'created_count': 0, 'total_cards': 20}

    stats = client.get(f'{API}/flashcards/sets/{set_id}/stats', params={'user_id': owner['user_id']}).json()
    assert stats['total_cards'] == 20
    assert stats['learning_cards'] == 1


@pytest.mark.integration
def test_initialize_rejects_wrong_card_count(client, owner, created_set):
    r = client.post(f'{API}/flashcards/sets/{created_set["id"]}/initialize', json={
        'user_id': owner['user_id'], 'card_count': 3
    })
    assert r.status_code == 400
    assert r.json()['type'] == 'InvalidInputError'


@pytest.mark.integration
@pytest.mark.parametrize('payload, status_code, error_type', [
    ({'card_index': 0, 'difficulty': 'medium'}, 400, 'InvalidInputError'),
    ({'card_index': 20, 'difficulty': 'good'}, 400, 'InvalidInputError'),
])
def test_review_errors(client, owner, created_set, payload, status_code, error_type):
    r = client.post(f'{API}/flashcards/sets/{created_set["id"]}/review', json={
        'user_id': owner['user_id'], **payload
    })
    assert r.status_code == status_code
    assert r.json()['type'] == error_type


@pytest.mark.integration
def test_unknown_set_is_404(client, owner):
    r = client.get(f'{API}/flashcards/sets/555/due', params={'user_id': owner['user_id']})
    assert r.status_code == 404
    assert r.json()['type'] == 'NotFoundError'


@pytest.mark.integration
@pytest.mark.parametrize('method, path, body', [
    ('get', '', None),
    ('get', '/due', None),
    ('get', '/stats', None),
    ('delete', '', None),
    ('post', '/review', {'card_index': 0, 'difficulty': 'good'}),
    ('post', '/initialize', {'card_count': 20}),
])
def test_unknown_user_is_404(client, created_set, method, path, body):
    url = f'{API}/flashcards/sets/{created_set["id"]}{path}'
    if body is None:
        r = client.request(method.upper(), url, params={'user_id': 4040})
    else:
        r = client.request(method.upper(), url, json={'user_id': 4040, **body})
    assert r.status_code == 404
    assert r.json()['detail'] == 'User with id 4040 not found'


@pytest.mark.integration
def test_other_users_set_is_403(client, stranger, created_set):
    r = client.get(f'{API}/flashcards/sets/{created_set["id"]}/due', params={'user_id': stranger})
    assert r.status_code == 403
    r = client.post(f'{API}/flashcards/sets/{created_set["id"]}/review', json={
        'user_id': stranger, 'card_index': 0, 'difficulty': 'good'
    })
    assert r.status_code == 403


@pytest.mark.integration
def test_create_set_validation(client, owner, stranger):
    r = client.post(f'{API}/flashcards/sets', json={
        'user_id': owner['user_id'], 'document_id': owner['document_id'], 'cards': []
    })
    assert r.status_code == 422

    r = client.post(f'{API}/flashcards/sets', json={
        'user_id': stranger, 'document_id': owner['document_id'], 'cards': _cards(1)
    })
    assert r.status_code == 403

    r = client.post(f'{API}/flashcards/sets', json={
        'user_id': 4040, 'document_id': owner['document_id'], 'cards': _cards(1)
    })
    assert r.status_code == 404


@pytest.mark.integration
def test_get_and_delete_set(client, owner, created_set):
    set_id = created_set['id']
    params = {'user_id': owner['user_id']}

    r = client.get(f'{API}/flashcards/sets/{set_id}', params=params)
    assert r.status_code == 200
    assert r.json()['cards'][3] == {'front': 'Question 3', 'back': 'Answer 3'}

    r = client.delete(f'{API}/flashcards/sets/{set_id}', params=params)
    assert r.status_code == 200
    assert r.json()['deleted_reviews'] == 20

    assert client.get(f'{API}/flashcards/sets/{set_id}', params=params).status_code == 404


@pytest.mark.integration
def test_progress_and_activity(client, owner, created_set):
    set_id = created_set['id']
    user_id = owner['user_id']
    for index in range(3):
        client.post(f'{API}/flashcards/sets/{set_id}/review', json={
            'user_id': user_id, 'card_index': index, 'difficulty': 'again'
        })

    progress = client.get(f'{API}/flashcard-stats/progress', params={'user_id': user_id}).json()
    assert progress == {'total': 20, 'new': 17, 'learning': 3, 'mastered': 0, 'reviewed': 3}

    activity = client.get(f'{API}/flashcard-stats/activity', params={'user_id': user_id}).json()
    assert len(activity['activity']) == 1
    assert activity['activity'][0]['count'] == 3

    r = client.get(f'{API}/flashcard-stats/activity', params={'user_id': user_id, 'days': 0})
    assert r.status_code == 400

    r = client.get(f'{API}/flashcard-stats/progress', params={'user_id': 999})
    assert r.status_code == 404


@pytest.mark.integration
def test_health(client):
    assert client.get('/health').json() == {'status': 'healthy'}
