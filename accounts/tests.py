from datetime import timedelta

from django.core import mail
from django.test import TestCase
from django.contrib.auth import get_user_model
from django.utils.timezone import now
from rest_framework import status
from rest_framework.test import APITestCase

from taskflow.exceptions import BadRequest, Conflict, Forbidden
from teams import services as team_services
from teams.models import Team
from . import services
from .models import PasswordResetToken

# Get the custom user model
User = get_user_model()


class CustomUserModelTest(TestCase):
    def test_create_user(self):
        user = User.objects.create_user(email='test@example.com', name='John', password='testpass123')
        self.assertEqual(user.email, 'test@example.com')
        self.assertEqual(user.name, 'John')
        self.assertEqual(user.avatar, '')
        self.assertTrue(user.check_password('testpass123'))

    def test_email_uniqueness(self):
        User.objects.create_user(email='test@example.com', name='John', password='testpass123')
        with self.assertRaises(Exception):  # Should raise an error if email is not unique
            User.objects.create_user(email='test@example.com', name='Jane', password='testpass123')


class AccountServiceTest(TestCase):
    def setUp(self):
        self.alice = User.objects.create_user(email='alice@example.com', name='Alice', password='testpass123')
        self.bob = User.objects.create_user(email='bob@example.com', name='Bob', password='testpass123')

    def test_register_sends_welcome_email(self):
        user = services.register_user('Carol', 'carol@example.com', 'testpass123')
        self.assertEqual(user.name, 'Carol')
        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].to, ['carol@example.com'])
        self.assertEqual(mail.outbox[0].subject, 'Welcome to Taskflow')

    def test_register_duplicate_email(self):
        with self.assertRaises(Conflict):
            services.register_user('Alice Again', 'ALICE@example.com', 'testpass123')

    def test_update_user_only_self(self):
        with self.assertRaises(Forbidden):
            services.update_user(self.bob.pk, self.alice, name='Mallory')
        with self.assertRaises(Conflict):
            services.update_user(self.alice.pk, self.alice, email='bob@example.com')

        user = services.update_user(self.alice.pk, self.alice, name='Alicia', email='alicia@example.com')
        self.assertEqual(user.name, 'Alicia')
        self.assertEqual(user.email, 'alicia@example.com')

    def test_update_user_clears_avatar(self):
        services.update_user(self.alice.pk, self.alice, avatar='https://example.com/a.png')
        user = services.update_user(self.alice.pk, self.alice, avatar='')
        self.assertEqual(user.avatar, '')
        user.refresh_from_db()
        self.assertEqual(user.avatar, '')

    def test_update_profile(self):
        services.update_profile(self.alice, name='Alicia', avatar='https://example.com/a.png')
        self.alice.refresh_from_db()
        self.assertEqual(self.alice.name, 'Alicia')
        self.assertEqual(self.alice.avatar, 'https://example.com/a.png')

    def test_change_password(self):
        with self.assertRaises(BadRequest):
            services.change_password(self.alice, 'wrongpass', 'newpass123')
        services.change_password(self.alice, 'testpass123', 'newpass123')
        self.alice.refresh_from_db()
        self.assertTrue(self.alice.check_password('newpass123'))

    def test_delete_account_hands_over_owned_teams(self):
        shared = team_services.create_team('Eng', self.alice, members=[self.bob])
        solo = team_services.create_team('Solo', self.alice)

        services.delete_account(self.alice)

        self.assertFalse(User.objects.filter(email='alice@example.com').exists())
        self.assertFalse(Team.objects.filter(pk=solo.pk).exists())
        shared.refresh_from_db()
        self.assertEqual(shared.owner, self.bob)
        self.assertEqual(team_services.member_ids(shared), [self.bob.pk])

    def test_password_reset_flow(self):
        services.request_password_reset('alice@example.com', base_url='https://app.example.com')
        record = PasswordResetToken.objects.get(user=self.alice)
        self.assertEqual(len(mail.outbox), 1)
        self.assertIn('https://app.example.com/reset-password?token=', mail.outbox[0].body)
        self.assertIn(record.token, mail.outbox[0].body)

        services.verify_reset_token('alice@example.com', record.token)
        services.reset_password('alice@example.com', record.token, 'brandnew123')
        self.alice.refresh_from_db()
        self.assertTrue(self.alice.check_password('brandnew123'))

        # Tokens are single use
        with self.assertRaises(BadRequest):
            services.reset_password('alice@example.com', record.token, 'again12345')

    def test_password_reset_unknown_email_is_silent(self):
        services.request_password_reset('nobody@example.com')
        self.assertEqual(len(mail.outbox), 0)
        self.assertFalse(PasswordResetToken.objects.exists())

    def test_expired_reset_token(self):
        record = PasswordResetToken.objects.create(
            user=self.alice,
            token='expired-token',
            expires_at=now() - timedelta(minutes=1),
        )
        with self.assertRaises(BadRequest):
            services.reset_password('alice@example.com', record.token, 'brandnew123')
        self.assertFalse(PasswordResetToken.objects.filter(pk=record.pk).exists())

    def test_reset_token_for_other_user(self):
        record = PasswordResetToken.objects.create(
            user=self.alice,
            token='alice-token',
            expires_at=now() + timedelta(hours=1),
        )
        with self.assertRaises(BadRequest):
            services.verify_reset_token('bob@example.com', record.token)


class UserRegistrationViewTest(APITestCase):
    def test_user_registration_success(self):
        data = {'name': 'John', 'email': 'test@example.com', 'password': 'testpass123'}
        response = self.client.post('/api/users/register/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['message'], 'User registered successfully')
        self.assertIn('access_token', response.data)
        self.assertIn('refresh_token', response.data)
        self.assertEqual(response.data['user']['email'], 'test@example.com')

    def test_user_registration_duplicate(self):
        User.objects.create_user(email='test@example.com', name='John', password='testpass123')
        data = {'name': 'John', 'email': 'test@example.com', 'password': 'testpass123'}
        response = self.client.post('/api/users/register/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_user_registration_invalid_data(self):
        response = self.client.post('/api/users/register/', {'email': 'not-an-email'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('email', response.data)


class UserLoginViewTest(APITestCase):
    def setUp(self):
        self.user = User.objects.create_user(email='test@example.com', name='John', password='testpass123')

    def test_login_success(self):
        data = {'email': 'test@example.com', 'password': 'testpass123'}
        response = self.client.post('/api/users/login/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('access_token', response.data)
        self.assertEqual(response.data['user']['id'], self.user.pk)

    def test_login_invalid_credentials(self):
        data = {'email': 'test@example.com', 'password': 'wrongpassword'}
        response = self.client.post('/api/users/login/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_token_authenticates_requests(self):
        response = self.client.post('/api/users/login/', {'email': 'test@example.com', 'password': 'testpass123'}, format='json')
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {response.data['access_token']}")
        response = self.client.get('/api/users/me/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['email'], 'test@example.com')

    def test_logout_blacklists_refresh_token(self):
        response = self.client.post('/api/users/login/', {'email': 'test@example.com', 'password': 'testpass123'}, format='json')
        refresh = response.data['refresh_token']
        self.client.force_authenticate(user=self.user)

        response = self.client.post('/api/users/logout/', {'refresh': refresh}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        response = self.client.post('/api/users/token/refresh/', {'refresh': refresh}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_logout_invalid_token(self):
        self.client.force_authenticate(user=self.user)
        response = self.client.post('/api/users/logout/', {'refresh': 'garbage'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class UserAccountViewTest(APITestCase):
    def setUp(self):
        self.user = User.objects.create_user(email='test@example.com', name='John', password='testpass123')
        self.other = User.objects.create_user(email='other@example.com', name='Zoe', password='testpass123')
        self.client.force_authenticate(user=self.user)

    def test_me_requires_authentication(self):
        self.client.force_authenticate(user=None)
        response = self.client.get('/api/users/me/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_list_and_detail(self):
        response = self.client.get('/api/users/')
        self.assertEqual([u['name'] for u in response.data], ['John', 'Zoe'])

        response = self.client.get(f'/api/users/{self.other.pk}/')
        self.assertEqual(response.data['email'], 'other@example.com')
        self.assertNotIn('password', response.data)

        response = self.client.get('/api/users/9999/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_update_other_user_forbidden(self):
        response = self.client.put(f'/api/users/{self.other.pk}/', {'name': 'Mallory'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_update_profile(self):
        response = self.client.put('/api/users/profile/', {'name': 'Johnny'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['name'], 'Johnny')

    def test_change_password_wrong_current(self):
        data = {'current_password': 'nope', 'new_password': 'newpass123'}
        response = self.client.put('/api/users/password/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_delete_account(self):
        response = self.client.delete('/api/users/me/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(User.objects.filter(pk=self.user.pk).exists())


class PasswordResetViewTest(APITestCase):
    def setUp(self):
        self.user = User.objects.create_user(email='test@example.com', name='John', password='testpass123')

    def test_request_is_generic_for_known_and_unknown_emails(self):
        known = self.client.post('/api/users/password-reset/request/', {'email': 'test@example.com'}, format='json')
        unknown = self.client.post('/api/users/password-reset/request/', {'email': 'nobody@example.com'}, format='json')
        self.assertEqual(known.status_code, status.HTTP_200_OK)
        self.assertEqual(known.data, unknown.data)
        self.assertEqual(len(mail.outbox), 1)

    def test_confirm_with_bad_token(self):
        data = {'email': 'test@example.com', 'token': 'wrong', 'new_password': 'brandnew123'}
        response = self.client.post('/api/users/password-reset/confirm/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_confirm(self):
        self.client.post('/api/users/password-reset/request/', {'email': 'test@example.com'}, format='json')
        token = PasswordResetToken.objects.get(user=self.user).token

        response = self.client.post('/api/users/password-reset/verify/', {'email': 'test@example.com', 'token': token}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        data = {'email': 'test@example.com', 'token': token, 'new_password': 'brandnew123'}
        response = self.client.post('/api/users/password-reset/confirm/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertTrue(self.user.check_password('brandnew123'))
