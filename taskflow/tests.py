from django.db import OperationalError
from django.test import SimpleTestCase
from rest_framework import status
from rest_framework.test import APITestCase

from .exceptions import Conflict, api_exception_handler


class ApiStatusTest(APITestCase):
    def test_status_is_public(self):
        response = self.client.get('/api/status/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {'status': 'API is running'})


class ExceptionHandlerTest(SimpleTestCase):
    def test_unreachable_store_maps_to_503(self):
        with self.assertLogs('taskflow.exceptions', level='ERROR'):
            response = api_exception_handler(OperationalError('database is locked'), {'view': None})
        self.assertEqual(response.status_code, status.HTTP_503_SERVICE_UNAVAILABLE)

    def test_domain_errors_use_drf_handler(self):
        response = api_exception_handler(Conflict("User already exists"), {'view': None, 'request': None})
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['detail'], 'User already exists')

    def test_unknown_errors_are_left_to_django(self):
        self.assertIsNone(api_exception_handler(RuntimeError('boom'), {'view': None}))
