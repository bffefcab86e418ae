# workshop_system/tests.py

import importlib
import os
import sys
import types
from unittest import mock

from django.db import transaction
from django.test import TestCase

from jobcards.models import JobCard
from . import settings as project_settings
from .models import DocumentSequence
from .numbering import next_sequence_number


def allocate(prefix='JC'):
    with transaction.atomic():
        return next_sequence_number(JobCard, 'job_no', prefix)


class NumberingTest(TestCase):
    def test_empty_table_starts_counter(self):
        self.assertFalse(DocumentSequence.objects.exists())
        self.assertEqual(allocate(), 'JC-001')
        self.assertEqual(DocumentSequence.objects.get(prefix='JC').last_number, 1)
        self.assertEqual(allocate(), 'JC-002')

    def test_prefixes_count_separately(self):
        self.assertEqual(allocate('JC'), 'JC-001')
        self.assertEqual(allocate('XX'), 'XX-001')
        self.assertEqual(DocumentSequence.objects.count(), 2)

    def test_existing_rows_seed_the_counter(self):
        JobCard.objects.create(job_no='JC-041', vehicle_type='Car', job_type='Pump', brand='Denso')
        self.assertEqual(allocate(), 'JC-042')

    def test_numbers_are_not_reused_after_delete(self):
        job_card = JobCard.objects.create(job_no=allocate(), vehicle_type='Car', job_type='Pump', brand='Denso')
        job_card.delete()
        self.assertEqual(allocate(), 'JC-002')


class TestingDetectionTest(TestCase):
    def tearDown(self):
        importlib.reload(project_settings)

    def test_python_m_pytest_counts_as_testing(self):
        environ = {key: value for key, value in os.environ.items() if key not in ('SECRET_KEY', 'DEBUG')}
        with mock.patch.dict(os.environ, environ, clear=True), \
                mock.patch.object(sys, 'argv', ['/venv/lib/site-packages/pytest/__main__.py']), \
                mock.patch.dict(sys.modules, {'pytest': types.ModuleType('pytest')}), \
                mock.patch('dotenv.load_dotenv'):
            module = importlib.reload(project_settings)
        self.assertTrue(module.TESTING)
        self.assertTrue(module.SECRET_KEY.startswith('django-insecure-'))
