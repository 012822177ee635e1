from unittest import mock
from smtplib import SMTPException

from django.core import mail
from django.test import TestCase
from django.contrib.auth import get_user_model
from rest_framework import status
from rest_framework.test import APITestCase

from taskflow.exceptions import BadRequest, EmailDeliveryFailed
from . import services

User = get_user_model()


class EmailServiceTest(TestCase):
    def test_send_email(self):
        result = services.send_email('someone@example.com', 'Hi', html='<p>Hello</p>', text='Hello')
        self.assertTrue(result['success'])
        self.assertEqual(len(mail.outbox), 1)
        message = mail.outbox[0]
        self.assertEqual(message.extra_headers['Message-ID'], result['message_id'])
        self.assertEqual(message.alternatives[0][1], 'text/html')

    def test_send_email_requires_recipient_and_body(self):
        with self.assertRaises(BadRequest):
            services.send_email('', 'Hi', text='Hello')
        with self.assertRaises(BadRequest):
            services.send_email('someone@example.com', 'Hi')

    def test_delivery_failure(self):
        with mock.patch('django.core.mail.EmailMultiAlternatives.send', side_effect=SMTPException('down')):
            with self.assertRaises(EmailDeliveryFailed):
                services.send_email('someone@example.com', 'Hi', text='Hello')

    def test_welcome_email_escapes_name(self):
        services.send_welcome_email('someone@example.com', '<script>alert(1)</script>')
        html = mail.outbox[0].alternatives[0][0]
        self.assertNotIn('<script>', html)
        self.assertIn('&lt;script&gt;alert(1)&lt;/script&gt;', html)

    def test_password_reset_link(self):
        services.send_password_reset_email('a+b@example.com', 'abc123', 'https://app.example.com/')
        body = mail.outbox[0].body
        self.assertIn('https://app.example.com/reset-password?token=abc123&email=a%2Bb%40example.com', body)


class EmailAPITest(APITestCase):
    def setUp(self):
        self.user = User.objects.create_user(email='test@example.com', name='John', password='testpass123')

    def test_send_requires_authentication(self):
        response = self.client.post('/api/email/send/', {'to': 'a@example.com', 'subject': 'Hi', 'text': 'Hello'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_send(self):
        self.client.force_authenticate(user=self.user)
        response = self.client.post('/api/email/send/', {'to': 'a@example.com', 'subject': 'Hi', 'text': 'Hello'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('message_id', response.data)

    def test_send_without_body(self):
        self.client.force_authenticate(user=self.user)
        response = self.client.post('/api/email/send/', {'to': 'a@example.com', 'subject': 'Hi'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_welcome(self):
        self.client.force_authenticate(user=self.user)
        response = self.client.post('/api/email/welcome/', {'email': 'new@example.com', 'name': 'Newbie'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('Newbie', mail.outbox[0].body)

    def test_public_password_reset(self):
        response = self.client.post('/api/email/password-reset/', {'email': 'nobody@example.com'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(mail.outbox), 0)

        response = self.client.post('/api/email/password-reset/', {'email': 'test@example.com'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(mail.outbox), 1)
