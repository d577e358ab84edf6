"""
Tests for the custom DRF exception handler.
"""
from django.test import SimpleTestCase
from rest_framework import exceptions as drf_exceptions

from apps.core.exceptions import (
    APIException,
    AuthenticationError,
    InternalError,
    custom_exception_handler,
)


class CustomExceptionHandlerTests(SimpleTestCase):

    def test_api_exception_uses_its_status(self):
        exc = APIException('Bad input', status_code=422, details={'field': 'email'})

        response = custom_exception_handler(exc, {})

        self.assertEqual(response.status_code, 422)
        self.assertEqual(response.data, {
            'error': 'APIException',
            'message': 'Bad input',
            'status_code': 422,
            'details': {'field': 'email'},
        })

    def test_subclass_name_is_reported(self):
        response = custom_exception_handler(InternalError('Broken'), {})

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.data['error'], 'InternalError')
        self.assertNotIn('details', response.data)

    def test_authentication_error_status_can_be_overridden(self):
        self.assertEqual(AuthenticationError().status_code, 401)
        self.assertEqual(AuthenticationError('Bad signature', status_code=400).status_code, 400)

    def test_drf_exception_is_standardized(self):
        response = custom_exception_handler(drf_exceptions.NotFound('Nope'), {})

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.data['error'], 'NotFound')
        self.assertEqual(response.data['message'], 'Nope')

    def test_drf_validation_error_keeps_field_details(self):
        exc = drf_exceptions.ValidationError({'email': ['This field is required.']})

        response = custom_exception_handler(exc, {})

        self.assertEqual(response.status_code, 400)
        self.assertIn('email', response.data['details'])

    def test_unexpected_exception_becomes_500(self):
        response = custom_exception_handler(RuntimeError('boom'), {})

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.data, {
            'error': 'InternalServerError',
            'message': 'An unexpected error occurred',
        })
