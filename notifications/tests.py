from django.test import TestCase, override_settings
from django.contrib.auth import get_user_model
from rest_framework import status
from rest_framework.test import APITestCase

from taskflow.exceptions import Forbidden, NotFound, ValidationError
from . import services
from .models import Notification

User = get_user_model()


class NotificationServiceTest(TestCase):
    def setUp(self):
        self.alice = User.objects.create_user(email='alice@example.com', name='Alice', password='testpass123')
        self.bob = User.objects.create_user(email='bob@example.com', name='Bob', password='testpass123')

    def test_create_notification(self):
        notification = services.create_notification('Hello', self.alice, 'system', related_item_id=7)
        self.assertFalse(notification.is_read)
        self.assertEqual(notification.related_item_id, '7')

    def test_create_notification_validation(self):
        with self.assertRaises(ValidationError):
            services.create_notification('', self.alice, 'system')
        with self.assertRaises(ValidationError):
            services.create_notification('Hello', None, 'system')
        with self.assertRaises(ValidationError):
            services.create_notification('Hello', self.alice, 'reminder')

    @override_settings(NOTIFICATION_LIST_LIMIT=3)
    def test_list_is_newest_first_and_limited(self):
        for i in range(5):
            services.create_notification(f'Message {i}', self.alice, 'system')
        services.create_notification('Other', self.bob, 'system')

        messages = [n.message for n in services.list_notifications(self.alice)]
        self.assertEqual(messages, ['Message 4', 'Message 3', 'Message 2'])

    def test_mark_all_read_is_idempotent(self):
        services.create_notification('One', self.alice, 'task')
        services.create_notification('Two', self.alice, 'comment')
        services.create_notification('Bob only', self.bob, 'task')

        self.assertEqual(services.mark_all_read(self.alice), 2)
        self.assertEqual(services.unread_count(self.alice), 0)
        self.assertEqual(services.mark_all_read(self.alice), 0)
        self.assertEqual(services.unread_count(self.alice), 0)
        self.assertEqual(services.unread_count(self.bob), 1)

    def test_mark_read_and_delete_require_recipient(self):
        notification = services.create_notification('Hello', self.alice, 'mention')
        with self.assertRaises(Forbidden):
            services.mark_read(notification.pk, self.bob)
        with self.assertRaises(Forbidden):
            services.delete_notification(notification.pk, self.bob)
        with self.assertRaises(NotFound):
            services.mark_read(9999, self.alice)

        services.mark_read(notification.pk, self.alice)
        notification.refresh_from_db()
        self.assertTrue(notification.is_read)

        services.delete_notification(notification.pk, self.alice)
        self.assertFalse(Notification.objects.filter(pk=notification.pk).exists())


class NotificationAPITest(APITestCase):
    def setUp(self):
        self.alice = User.objects.create_user(email='alice@example.com', name='Alice', password='testpass123')
        self.bob = User.objects.create_user(email='bob@example.com', name='Bob', password='testpass123')
        self.client.force_authenticate(user=self.alice)

    def test_list_and_unread_count(self):
        services.create_notification('Hello', self.alice, 'system')
        response = self.client.get('/api/notifications/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data[0]['message'], 'Hello')
        self.assertEqual(response.data[0]['user_id'], self.alice.pk)

        response = self.client.get('/api/notifications/unread-count/')
        self.assertEqual(response.data['count'], 1)

    def test_read_all_twice(self):
        services.create_notification('Hello', self.alice, 'system')
        response = self.client.put('/api/notifications/read-all/')
        self.assertEqual(response.data['count'], 1)
        response = self.client.put('/api/notifications/read-all/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 0)

    def test_other_users_notification_is_forbidden(self):
        notification = services.create_notification('Hello', self.bob, 'system')
        response = self.client.put(f'/api/notifications/{notification.pk}/read/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        response = self.client.delete(f'/api/notifications/{notification.pk}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_missing_notification(self):
        response = self.client.delete('/api/notifications/9999/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
