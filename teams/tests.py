from django.test import TestCase, override_settings
from django.contrib.auth import get_user_model
from rest_framework import status
from rest_framework.test import APITestCase

from notifications.models import Notification
from taskflow.exceptions import BadRequest, Conflict, Forbidden, NotFound
from . import services
from .models import Team, TeamMembership

User = get_user_model()


def first_member(member_ids):
    return member_ids[0]


def last_member(member_ids):
    return member_ids[-1]


class TeamServiceTest(TestCase):
    def setUp(self):
        self.alice = User.objects.create_user(email='alice@example.com', name='Alice', password='testpass123')
        self.bob = User.objects.create_user(email='bob@example.com', name='Bob', password='testpass123')
        self.carol = User.objects.create_user(email='carol@example.com', name='Carol', password='testpass123')

    def test_create_team_adds_owner_as_member(self):
        team = services.create_team('Eng', self.alice)
        self.assertEqual(team.owner, self.alice)
        self.assertEqual(services.member_ids(team), [self.alice.pk])

    def test_create_team_with_initial_members(self):
        team = services.create_team('Eng', self.alice, members=[self.bob, self.bob])
        self.assertEqual(sorted(services.member_ids(team)), sorted([self.alice.pk, self.bob.pk]))

    def test_eng_scenario(self):
        # A creates, invites B, leaves; B becomes owner; B leaves and the team is gone
        team = services.create_team('Eng', self.alice)
        services.invite_member(team.pk, 'bob@example.com', self.alice)
        self.assertEqual(services.member_ids(team), [self.alice.pk, self.bob.pk])

        outcome = services.leave_team(team.pk, self.alice)
        team.refresh_from_db()
        self.assertFalse(outcome.deleted)
        self.assertEqual(outcome.new_owner_id, self.bob.pk)
        self.assertEqual(team.owner, self.bob)
        self.assertEqual(services.member_ids(team), [self.bob.pk])

        outcome = services.leave_team(team.pk, self.bob)
        self.assertTrue(outcome.deleted)
        self.assertIsNone(outcome.team)
        self.assertFalse(Team.objects.filter(pk=team.pk).exists())

    def test_owner_leaving_single_member_team_deletes_it(self):
        team = services.create_team('Solo', self.alice)
        services.leave_team(team.pk, self.alice)
        self.assertFalse(Team.objects.filter(pk=team.pk).exists())
        self.assertFalse(TeamMembership.objects.filter(team_id=team.pk).exists())

    def test_successor_is_chosen_by_policy(self):
        team = services.create_team('Eng', self.alice, members=[self.bob, self.carol])
        services.leave_team(team.pk, self.alice, pick_successor=last_member)
        team.refresh_from_db()
        self.assertEqual(team.owner_id, services.member_ids(team)[-1])
        self.assertNotIn(self.alice.pk, services.member_ids(team))

    def test_successor_receives_notification(self):
        team = services.create_team('Eng', self.alice, members=[self.bob])
        services.leave_team(team.pk, self.alice, pick_successor=first_member)
        self.assertTrue(Notification.objects.filter(user=self.bob, type='system', related_item_id=str(team.pk)).exists())

    @override_settings(TEAM_SUCCESSOR_POLICY='teams.tests.first_member')
    def test_successor_policy_from_settings(self):
        team = services.create_team('Eng', self.alice, members=[self.carol, self.bob])
        remaining = [pk for pk in services.member_ids(team) if pk != self.alice.pk]
        services.leave_team(team.pk, self.alice)
        team.refresh_from_db()
        self.assertEqual(team.owner_id, remaining[0])

    def test_policy_returning_non_member_is_rejected(self):
        team = services.create_team('Eng', self.alice, members=[self.bob])
        with self.assertRaises(ValueError):
            services.leave_team(team.pk, self.alice, pick_successor=lambda ids: self.carol.pk)

    def test_random_successor_picks_a_remaining_member(self):
        ids = [self.bob.pk, self.carol.pk]
        for _ in range(10):
            self.assertIn(services.random_successor(ids), ids)

    def test_non_member_cannot_leave(self):
        team = services.create_team('Eng', self.alice)
        with self.assertRaises(BadRequest):
            services.leave_team(team.pk, self.bob)

    def test_member_leaving_keeps_owner(self):
        team = services.create_team('Eng', self.alice, members=[self.bob])
        outcome = services.leave_team(team.pk, self.bob)
        team.refresh_from_db()
        self.assertFalse(outcome.deleted)
        self.assertIsNone(outcome.new_owner_id)
        self.assertEqual(team.owner, self.alice)
        self.assertEqual(services.member_ids(team), [self.alice.pk])

    def test_strict_leave_refuses_owner(self):
        team = services.create_team('Eng', self.alice, members=[self.bob])
        with self.assertRaises(BadRequest):
            services.leave_team_as_member(team.pk, self.alice)
        services.leave_team_as_member(team.pk, self.bob)
        self.assertFalse(team.has_member(self.bob))

    def test_invite_requires_owner(self):
        team = services.create_team('Eng', self.alice, members=[self.bob])
        with self.assertRaises(Forbidden):
            services.invite_member(team.pk, 'carol@example.com', self.bob)

    def test_invite_unknown_email(self):
        team = services.create_team('Eng', self.alice)
        with self.assertRaises(NotFound):
            services.invite_member(team.pk, 'nobody@example.com', self.alice)

    def test_invite_existing_member(self):
        team = services.create_team('Eng', self.alice, members=[self.bob])
        with self.assertRaises(Conflict):
            services.invite_member(team.pk, 'bob@example.com', self.alice)

    def test_invite_notifies_new_member(self):
        team = services.create_team('Eng', self.alice)
        services.invite_member(team.pk, 'bob@example.com', self.alice)
        self.assertEqual(Notification.objects.filter(user=self.bob, type='system').count(), 1)

    def test_remove_member(self):
        team = services.create_team('Eng', self.alice, members=[self.bob, self.carol])
        services.remove_member(team.pk, self.bob.pk, self.alice)
        self.assertFalse(team.has_member(self.bob))

        with self.assertRaises(Forbidden):
            services.remove_member(team.pk, self.alice.pk, self.carol)
        with self.assertRaises(BadRequest):
            services.remove_member(team.pk, self.alice.pk, self.alice)

    def test_member_can_remove_themselves(self):
        team = services.create_team('Eng', self.alice, members=[self.bob, self.carol])
        services.remove_member(team.pk, self.bob.pk, self.bob)
        self.assertFalse(team.has_member(self.bob))
        self.assertEqual(sorted(services.member_ids(team)), sorted([self.alice.pk, self.carol.pk]))

    def test_member_cannot_remove_another_member(self):
        team = services.create_team('Eng', self.alice, members=[self.bob, self.carol])
        with self.assertRaises(Forbidden):
            services.remove_member(team.pk, self.carol.pk, self.bob)
        self.assertTrue(team.has_member(self.carol))

    def test_get_team_requires_membership(self):
        team = services.create_team('Eng', self.alice)
        with self.assertRaises(Forbidden):
            services.get_team(team.pk, self.bob)
        with self.assertRaises(NotFound):
            services.get_team(team.pk + 100, self.alice)

    def test_update_and_delete_are_owner_only(self):
        team = services.create_team('Eng', self.alice, members=[self.bob])
        with self.assertRaises(Forbidden):
            services.update_team(team.pk, self.bob, name='Ops')
        with self.assertRaises(Forbidden):
            services.delete_team(team.pk, self.bob)

        services.update_team(team.pk, self.alice, name='Ops', description='Operations')
        team.refresh_from_db()
        self.assertEqual(team.name, 'Ops')
        self.assertEqual(team.description, 'Operations')

        services.delete_team(team.pk, self.alice)
        self.assertFalse(Team.objects.filter(pk=team.pk).exists())


class TeamAPITest(APITestCase):
    def setUp(self):
        self.alice = User.objects.create_user(email='alice@example.com', name='Alice', password='testpass123')
        self.bob = User.objects.create_user(email='bob@example.com', name='Bob', password='testpass123')
        self.client.force_authenticate(user=self.alice)

    def test_create_and_list_teams(self):
        response = self.client.post('/api/teams/', {'name': 'Eng', 'description': 'Engineering'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['owner']['id'], self.alice.pk)
        self.assertTrue(response.data['is_owner'])
        self.assertEqual(response.data['member_count'], 1)

        response = self.client.get('/api/teams/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)

    def test_invite_and_owner_leave(self):
        team = services.create_team('Eng', self.alice)

        response = self.client.post(f'/api/teams/{team.pk}/members/invite/', {'email': 'bob@example.com'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([m['id'] for m in response.data['members']], [self.alice.pk, self.bob.pk])

        response = self.client.post(f'/api/teams/{team.pk}/members/invite/', {'email': 'bob@example.com'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

        response = self.client.delete(f'/api/teams/{team.pk}/leave/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data['team_deleted'])
        self.assertEqual(response.data['new_owner_id'], self.bob.pk)

    def test_owner_leave_deletes_empty_team(self):
        team = services.create_team('Solo', self.alice)
        response = self.client.delete(f'/api/teams/{team.pk}/leave/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['team_deleted'])

    def test_list_includes_members_and_counts(self):
        services.create_team('Eng', self.alice, members=[self.bob])
        services.create_team('Ops', self.bob)
        services.create_team('Design', self.alice)

        response = self.client.get('/api/teams/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([t['name'] for t in response.data], ['Design', 'Eng'])
        eng = response.data[1]
        self.assertEqual(eng['member_count'], 2)
        self.assertEqual({m['id'] for m in eng['members']}, {self.alice.pk, self.bob.pk})

    def test_member_self_removal_endpoint(self):
        team = services.create_team('Eng', self.bob, members=[self.alice])
        response = self.client.delete(f'/api/teams/{team.pk}/members/{self.alice.pk}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([m['id'] for m in response.data['members']], [self.bob.pk])

    def test_strict_leave_endpoint_refuses_owner(self):
        team = services.create_team('Eng', self.alice, members=[self.bob])
        response = self.client.delete(f'/api/teams/{team.pk}/members/me/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_non_member_gets_forbidden(self):
        team = services.create_team('Eng', self.bob)
        response = self.client.get(f'/api/teams/{team.pk}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_missing_team_is_not_found(self):
        response = self.client.get('/api/teams/999/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_requires_authentication(self):
        self.client.force_authenticate(user=None)
        response = self.client.get('/api/teams/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
