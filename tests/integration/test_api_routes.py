"""
Integration tests for API routes.
Tests the tournament registrations blueprint and the main app routes.
"""
import json


def registrations_url(tournament_id, path=''):
    return f'/api/v1/tournaments/{tournament_id}/registrations{path}'


class TestHealthEndpoint:
    """Tests for /health endpoint."""

    def test_health_check(self, client, db_session):
        """Health check should return 200."""
        response = client.get('/health')
        assert response.status_code == 200

        data = json.loads(response.data)
        assert data['status'] == 'healthy'
        assert data['database'] == 'ok'


class TestTournaments:
    """Tests for tournament lookup routes."""

    def test_list_tournaments(self, client, campeonato_id, copa_id):
        response = client.get('/api/v1/tournaments')

        assert response.status_code == 200
        ids = {t['id'] for t in json.loads(response.data)}
        assert ids == {campeonato_id, copa_id}

    def test_list_by_type(self, client, campeonato_id, copa_id):
        response = client.get('/api/v1/tournaments?type=COPA_PANAMERICANA')
        data = json.loads(response.data)
        assert [t['id'] for t in data] == [copa_id]

    def test_get_tournament_not_found(self, client, db_session):
        response = client.get('/api/v1/tournaments/nonexistent')
        assert response.status_code == 404
        assert 'error' in json.loads(response.data)

    def test_rules(self, client, campeonato_id):
        response = client.get(f'/api/v1/tournaments/{campeonato_id}/rules')

        assert response.status_code == 200
        data = json.loads(response.data)
        assert data['maxPerCountryPerCategory'] == 2
        assert 'USA' in data['eligibleCountries']

    def test_stats(self, client, copa_id, choreography_payload):
        client.post('/api/v1/choreographies', json=choreography_payload(copa_id))

        data = json.loads(client.get(f'/api/v1/tournaments/{copa_id}/stats').data)

        assert data['totalChoreographies'] == 1
        assert data['choreographiesByCategory'] == {'SENIOR': 1}
        assert data['choreographiesByType'] == {'TRIO': 1}
        assert data['countriesParticipating'] == ['USA']


class TestChoreographyRoutes:
    """Tests for /api/v1/choreographies."""

    def test_create(self, client, campeonato_id, choreography_payload):
        response = client.post('/api/v1/choreographies', json=choreography_payload(campeonato_id))

        assert response.status_code == 201
        data = json.loads(response.data)
        assert data['status'] == 'PENDING'
        assert data['tournament']['id'] == campeonato_id
        assert sorted(g['figId'] for g in data['gymnasts']) == ['FIG001', 'FIG002', 'FIG003']

    def test_quota_enforced(self, client, campeonato_id, choreography_payload):
        """Campeonato allows two choreographies per country and category."""
        for fig_ids in (['FIG001', 'FIG002', 'FIG003'], ['FIG004', 'FIG005', 'FIG006']):
            response = client.post('/api/v1/choreographies',
                                   json=choreography_payload(campeonato_id, gymnastFigIds=fig_ids))
            assert response.status_code == 201

        response = client.post('/api/v1/choreographies', json=choreography_payload(
            campeonato_id, gymnastFigIds=['FIG007', 'FIG008', 'FIG009']
        ))

        assert response.status_code == 400
        assert 'error' in json.loads(response.data)

    def test_unlicensed_gymnast(self, client, copa_id, choreography_payload):
        response = client.post('/api/v1/choreographies', json=choreography_payload(
            copa_id, gymnastFigIds=['FIG001', 'FIG002', 'FIG999']
        ))

        assert response.status_code == 400
        assert 'valid FIG license' in json.loads(response.data)['error']

    def test_unknown_gymnast(self, client, copa_id, choreography_payload):
        response = client.post('/api/v1/choreographies', json=choreography_payload(
            copa_id, gymnastFigIds=['FIG001', 'FIG002', 'NOPE-1']
        ))
        assert response.status_code == 404

    def test_missing_fields(self, client, copa_id):
        response = client.post('/api/v1/choreographies', json={'tournamentId': copa_id})
        assert response.status_code == 400

    def test_list_and_delete(self, client, copa_id, choreography_payload):
        created = json.loads(client.post('/api/v1/choreographies', json=choreography_payload(copa_id)).data)

        listed = json.loads(client.get('/api/v1/choreographies?country=USA').data)
        assert [c['id'] for c in listed] == [created['id']]
        assert json.loads(client.get('/api/v1/choreographies?country=MEX').data) == []

        response = client.delete(f"/api/v1/choreographies/{created['id']}")
        assert response.status_code == 204
        assert client.get(f"/api/v1/choreographies/{created['id']}").status_code == 404

    def test_country_stats(self, client, copa_id, choreography_payload):
        client.post('/api/v1/choreographies', json=choreography_payload(copa_id))
        response = client.get('/api/v1/choreographies/stats/USA')
        assert response.status_code == 200


class TestRegistrationRoutes:
    """Tests for per-kind routes under /api/v1/tournaments/<id>/registrations."""

    def test_register_single_coach(self, client, copa_id, coach_payload):
        response = client.post(registrations_url(copa_id, '/coaches'), json=coach_payload('ignored'))

        assert response.status_code == 201
        data = json.loads(response.data)
        assert data['success'] is True
        assert data['results'][0]['figId'] == 'C-1001'

    def test_register_list_partial_success(self, client, copa_id, judge_payload):
        response = client.post(registrations_url(copa_id, '/judges'), json=[
            judge_payload(copa_id),
            judge_payload(copa_id),
        ])

        assert response.status_code == 207
        data = json.loads(response.data)
        assert len(data['results']) == 1
        assert 'already registered' in data['errors'][0]

    def test_register_all_fail(self, client, copa_id, choreography_payload):
        response = client.post(registrations_url(copa_id, '/choreographies'), json=[
            choreography_payload(copa_id, gymnastFigIds=['FIG001']),
        ])

        assert response.status_code == 400
        data = json.loads(response.data)
        assert data['success'] is False
        assert data['results'] == []

    def test_unknown_tournament(self, client, db_session, coach_payload):
        response = client.post(registrations_url('missing', '/coaches'), json=coach_payload('missing'))
        assert response.status_code == 404

    def test_unknown_kind(self, client, copa_id):
        response = client.get(registrations_url(copa_id, '/spectators'))
        assert response.status_code == 404

    def test_list_by_country(self, client, copa_id, coach_payload):
        client.post(registrations_url(copa_id, '/coaches'), json=[
            coach_payload(copa_id),
            coach_payload(copa_id, fig_id='C-1002', country='MEX'),
        ])

        data = json.loads(client.get(registrations_url(copa_id, '/coaches?country=mex')).data)
        assert [c['figId'] for c in data] == ['C-1002']

    def test_update_and_delete(self, client, copa_id, coach_payload):
        created = json.loads(client.post(registrations_url(copa_id, '/coaches'),
                                         json=coach_payload(copa_id)).data)['results'][0]
        url = registrations_url(copa_id, f"/coaches/{created['id']}")

        response = client.put(url, json={'club': 'Club Lima'})
        assert response.status_code == 200
        assert json.loads(response.data)['club'] == 'Club Lima'

        assert client.delete(url).status_code == 200
        assert client.delete(url).status_code == 404

    def test_update_rejects_null_name(self, client, copa_id, coach_payload):
        created = json.loads(client.post(registrations_url(copa_id, '/coaches'),
                                         json=coach_payload(copa_id)).data)['results'][0]

        response = client.put(registrations_url(copa_id, f"/coaches/{created['id']}"), json={'firstName': None})

        assert response.status_code == 400
        error = json.loads(response.data)['error']
        assert 'firstName' in error
        assert 'already registered' not in error

    def test_update_to_taken_fig_id(self, client, copa_id, coach_payload):
        response = client.post(registrations_url(copa_id, '/coaches'), json=[
            coach_payload(copa_id),
            coach_payload(copa_id, fig_id='C-1002'),
        ])
        second = json.loads(response.data)['results'][1]

        response = client.put(registrations_url(copa_id, f"/coaches/{second['id']}"), json={'figId': 'C-1001'})

        assert response.status_code == 400
        assert 'already registered' in json.loads(response.data)['error']

    def test_entry_from_other_tournament(self, client, copa_id, campeonato_id, coach_payload):
        created = json.loads(client.post(registrations_url(copa_id, '/coaches'),
                                         json=coach_payload(copa_id)).data)['results'][0]

        response = client.put(registrations_url(campeonato_id, f"/coaches/{created['id']}"),
                              json={'club': 'Elsewhere'})
        assert response.status_code == 404


class TestSupportRoutes:
    """Tests for support staff registrations."""

    def test_register_list(self, client, copa_id, support_payload):
        response = client.post(registrations_url(copa_id, '/support'), json=[
            support_payload(copa_id),
            support_payload(copa_id, firstName='Luis', role='DELEGATION_LEADER'),
            support_payload(copa_id, firstName='Bad', role='COOK'),
        ])

        assert response.status_code == 207
        data = json.loads(response.data)
        assert [s['role'] for s in data['results']] == ['MEDIC', 'DELEGATION_LEADER']
        assert data['errors'][0].startswith('Failed to register support "Bad Vargas"')

    def test_filter_by_role(self, client, copa_id, support_payload):
        client.post(registrations_url(copa_id, '/support'), json=[
            support_payload(copa_id),
            support_payload(copa_id, firstName='Luis', role='COMPANION'),
        ])

        data = json.loads(client.get(registrations_url(copa_id, '/support?role=companion')).data)
        assert [s['firstName'] for s in data] == ['Luis']
        assert client.get(registrations_url(copa_id, '/support?role=COOK')).status_code == 400

    def test_update_status_and_delete(self, client, copa_id, support_payload):
        created = json.loads(client.post(registrations_url(copa_id, '/support'),
                                         json=support_payload(copa_id)).data)['results'][0]
        url = registrations_url(copa_id, f"/support/{created['id']}")

        response = client.put(url, json={'email': 'medic@usagym.org', 'tournamentId': 'ignored'})
        assert response.status_code == 200
        assert json.loads(response.data)['email'] == 'medic@usagym.org'
        assert json.loads(response.data)['tournament']['id'] == copa_id

        assert client.put(url, json={'role': 'COOK'}).status_code == 400

        response = client.patch(f'{url}/status', json={'status': 'SUBMITTED'})
        assert json.loads(response.data) == {'success': True}

        assert client.delete(url).status_code == 200
        assert json.loads(client.get(registrations_url(copa_id, '/support')).data) == []


class TestBatchAndSummaryRoutes:
    """Tests for batch registration, summaries and stats."""

    def test_batch_partial_success(self, client, copa_id):
        response = client.post(registrations_url(copa_id, '/batch'), json={
            'country': 'USA',
            'coaches': [{'id': 'C-1', 'firstName': 'Maria', 'lastName': 'Lopez'}],
            'judges': [{'id': 'J-1', 'lastName': 'Ruiz', 'fullName': 'Judge Without First Name'}],
        })

        assert response.status_code == 207
        data = json.loads(response.data)
        assert data['success'] is False
        assert len(data['results']['coaches']) == 1
        assert data['errors'][0].startswith('Failed to register judge "Judge Without First Name"')

    def test_batch_all_success(self, client, copa_id):
        response = client.post(registrations_url(copa_id, '/batch'), json={
            'tournament': {'id': copa_id},
            'country': 'USA',
            'coaches': [{'id': 'C-1', 'firstName': 'Maria', 'lastName': 'Lopez'}],
        })
        assert response.status_code == 201

    def test_batch_tournament_mismatch(self, client, copa_id, campeonato_id):
        response = client.post(registrations_url(copa_id, '/batch'), json={
            'tournament': {'id': campeonato_id},
            'country': 'USA',
        })
        assert response.status_code == 400

    def test_summary_requires_country(self, client, copa_id):
        response = client.get(registrations_url(copa_id, '/summary'))
        assert response.status_code == 400

    def test_summary(self, client, copa_id, coach_payload):
        client.post(registrations_url(copa_id, '/coaches'), json=coach_payload(copa_id))

        data = json.loads(client.get(registrations_url(copa_id, '/summary?country=usa')).data)

        assert data['summary']['country'] == 'USA'
        assert data['totals']['coaches'] == 1
        assert data['totals']['total'] == 1

    def test_stats(self, client, copa_id, judge_payload):
        client.post(registrations_url(copa_id, '/judges'), json=judge_payload(copa_id))

        data = json.loads(client.get(registrations_url(copa_id, '/stats')).data)
        assert data == {'choreographies': 0, 'coaches': 0, 'judges': 1, 'total': 1}

    def test_global_summary(self, client, copa_id, campeonato_id, judge_payload):
        client.post(registrations_url(copa_id, '/judges'), json=judge_payload(copa_id))

        data = json.loads(client.get('/api/v1/registrations/summary').data)

        assert len(data['tournaments']) == 2
        assert data['totals']['judges'] == 1


class TestStatusRoutes:
    """Tests for registration status endpoints."""

    def _register_judges(self, client, tournament_id, judge_payload):
        response = client.post(registrations_url(tournament_id, '/judges'), json=[
            judge_payload(tournament_id, fig_id='J-1'),
            judge_payload(tournament_id, fig_id='J-2'),
            judge_payload(tournament_id, fig_id='J-3', country='MEX'),
        ])
        return [j['id'] for j in json.loads(response.data)['results']]

    def test_update_single_status(self, client, copa_id, judge_payload):
        ids = self._register_judges(client, copa_id, judge_payload)

        response = client.patch(registrations_url(copa_id, f'/judges/{ids[0]}/status'),
                                json={'status': 'SUBMITTED', 'notes': 'Sent'})

        assert response.status_code == 200
        submitted = json.loads(client.get(registrations_url(copa_id, '/judges/status/SUBMITTED')).data)
        assert [j['id'] for j in submitted] == [ids[0]]
        assert submitted[0]['notes'] == 'Sent'

    def test_invalid_status(self, client, copa_id, judge_payload):
        ids = self._register_judges(client, copa_id, judge_payload)

        response = client.patch(registrations_url(copa_id, f'/judges/{ids[0]}/status'),
                                json={'status': 'APPROVED'})
        assert response.status_code == 400
        assert client.get(registrations_url(copa_id, '/judges/status/APPROVED')).status_code == 400

    def test_update_status_missing_entry(self, client, copa_id):
        response = client.patch(registrations_url(copa_id, '/judges/missing/status'),
                                json={'status': 'SUBMITTED'})
        assert response.status_code == 404

    def test_bulk_update_reports_missing(self, client, copa_id, judge_payload):
        ids = self._register_judges(client, copa_id, judge_payload)

        response = client.patch(registrations_url(copa_id, '/judges/status'), json={
            'status': 'REGISTERED',
            'registrationIds': [ids[0], ids[1], 'missing'],
        })

        data = json.loads(response.data)
        assert data['success'] is False
        assert data['updated'] == 2
        assert len(data['errors']) == 1

    def test_bulk_update_skips_other_tournament(self, client, copa_id, campeonato_id, coach_payload):
        created = json.loads(client.post(registrations_url(copa_id, '/coaches'),
                                         json=coach_payload(copa_id)).data)['results'][0]

        response = client.patch(registrations_url(campeonato_id, '/coaches/status'), json={
            'status': 'REGISTERED',
            'registrationIds': [created['id']],
        })

        data = json.loads(response.data)
        assert data['updated'] == 0
        assert 'does not belong to tournament' in data['errors'][0]
        pending = json.loads(client.get(registrations_url(copa_id, '/coaches/status/PENDING')).data)
        assert [c['id'] for c in pending] == [created['id']]

    def test_bulk_update_requires_ids(self, client, copa_id):
        response = client.patch(registrations_url(copa_id, '/judges/status'), json={'status': 'REGISTERED'})
        assert response.status_code == 400

    def test_transition_by_country(self, client, copa_id, judge_payload):
        self._register_judges(client, copa_id, judge_payload)

        response = client.post(registrations_url(copa_id, '/judges/status/transition'), json={
            'fromStatus': 'PENDING',
            'toStatus': 'SUBMITTED',
            'country': 'usa',
        })

        assert json.loads(response.data) == {'success': True, 'updated': 2}
        pending = json.loads(client.get(registrations_url(copa_id, '/judges/status/PENDING')).data)
        assert [j['country'] for j in pending] == ['MEX']


class TestGymnastRoutes:
    """Tests for /api/v1/gymnasts."""

    def test_list_by_country(self, client, db_session, fig_registry):
        fig_registry.add('MEX-1', first_name='Ana', last_name='Diaz', country='MEX')

        data = json.loads(client.get('/api/v1/gymnasts?country=MEX').data)
        assert [g['figId'] for g in data] == ['MEX-1']

    def test_get_by_fig_id(self, client, db_session):
        response = client.get('/api/v1/gymnasts/FIG001')
        assert response.status_code == 200
        assert json.loads(response.data)['lastName'] == 'SMITH'

        assert client.get('/api/v1/gymnasts/NOPE').status_code == 404

    def test_create_local(self, client, db_session):
        response = client.post('/api/v1/gymnasts', json={
            'figId': 'LOCAL-1',
            'firstName': 'Lia',
            'lastName': 'Nunez',
            'gender': 'FEMALE',
            'country': 'USA',
            'dateOfBirth': '2012-05-01',
        })

        assert response.status_code == 201
        data = json.loads(response.data)
        assert data['isLocal'] is True
        assert data['licenseValid'] is True

    def test_create_local_duplicate(self, client, db_session):
        response = client.post('/api/v1/gymnasts', json={
            'figId': 'FIG001',
            'firstName': 'Lia',
            'lastName': 'Nunez',
            'gender': 'FEMALE',
            'country': 'USA',
            'dateOfBirth': '2012-05-01',
        })
        assert response.status_code == 400

    def test_clear_cache(self, client, fig_registry):
        response = client.delete('/api/v1/gymnasts/cache')

        assert response.status_code == 200
        assert fig_registry.cleared == 1


class TestLocalCoachRoutes:
    """Tests for /api/v1/coaches."""

    def _payload(self, fig_id='LC-100', **overrides):
        payload = {
            'figId': fig_id,
            'firstName': 'Rosa',
            'lastName': 'Quispe',
            'gender': 'FEMALE',
            'country': 'PER',
            'level': 'L2',
            'levelDescription': 'Level 2 coach',
        }
        payload.update(overrides)
        return payload

    def test_create_and_get(self, client, db_session):
        response = client.post('/api/v1/coaches', json=self._payload())
        assert response.status_code == 201
        assert json.loads(response.data)['isLocal'] is True

        data = json.loads(client.get('/api/v1/coaches/LC-100').data)
        assert data['fullName'] == 'Rosa Quispe'
        assert client.get('/api/v1/coaches/missing').status_code == 404

    def test_create_duplicate(self, client, db_session):
        client.post('/api/v1/coaches', json=self._payload())
        response = client.post('/api/v1/coaches', json=self._payload())

        assert response.status_code == 400
        assert 'already exists' in json.loads(response.data)['error']

    def test_search(self, client, db_session):
        client.post('/api/v1/coaches', json=self._payload())
        client.post('/api/v1/coaches', json=self._payload('LC-101', lastName='Silva', country='BRA'))

        data = json.loads(client.get('/api/v1/coaches?q=silv').data)
        assert [c['figId'] for c in data] == ['LC-101']
        data = json.loads(client.get('/api/v1/coaches?country=per').data)
        assert [c['figId'] for c in data] == ['LC-100']


class TestErrorHandling:

    def test_unknown_route(self, client):
        response = client.get('/api/v1/nothing-here')
        assert response.status_code == 404
        assert json.loads(response.data) == {'error': 'Not found'}

    def test_method_not_allowed(self, client):
        response = client.put('/api/v1/tournaments')
        assert response.status_code == 405
