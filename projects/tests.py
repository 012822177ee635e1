from django.test import TestCase
from django.contrib.auth import get_user_model
from rest_framework import status
from rest_framework.test import APITestCase

from accounts.services import delete_account
from notifications.models import Notification
from taskflow.exceptions import BadRequest, Conflict, Forbidden, NotFound
from tasks.models import Task
from . import services
from .models import Project, DEFAULT_PROJECT_COLOR

User = get_user_model()


class ProjectServiceTest(TestCase):
    def setUp(self):
        self.alice = User.objects.create_user(email='alice@example.com', name='Alice', password='testpass123')
        self.bob = User.objects.create_user(email='bob@example.com', name='Bob', password='testpass123')
        self.carol = User.objects.create_user(email='carol@example.com', name='Carol', password='testpass123')

    def test_create_project_defaults(self):
        project = services.create_project('Website', self.alice)
        self.assertEqual(project.owner, self.alice)
        self.assertEqual(project.color, DEFAULT_PROJECT_COLOR)
        self.assertEqual(list(project.members.all()), [self.alice])

    def test_website_scenario(self):
        project = services.create_project('Website', self.alice)
        with self.assertRaises(Forbidden):
            services.get_project(project.pk, self.carol)

        services.add_member(project.pk, self.carol.pk, self.alice)
        self.assertEqual(services.get_project(project.pk, self.carol), project)

    def test_add_member_by_non_owner_is_forbidden(self):
        project = services.create_project('Website', self.alice)
        services.add_member(project.pk, self.bob.pk, self.alice)

        # Forbidden whether or not the target is already a member
        with self.assertRaises(Forbidden):
            services.add_member(project.pk, self.carol.pk, self.bob)
        with self.assertRaises(Forbidden):
            services.add_member(project.pk, self.alice.pk, self.bob)
        with self.assertRaises(Forbidden):
            services.add_member(project.pk, self.bob.pk, self.carol)

    def test_add_member_errors(self):
        project = services.create_project('Website', self.alice)
        with self.assertRaises(NotFound):
            services.add_member(project.pk, 9999, self.alice)
        with self.assertRaises(Conflict):
            services.add_member(project.pk, self.alice.pk, self.alice)
        with self.assertRaises(NotFound):
            services.add_member(project.pk + 100, self.bob.pk, self.alice)

    def test_add_member_notifies_user(self):
        project = services.create_project('Website', self.alice)
        services.add_member(project.pk, self.bob.pk, self.alice)
        notification = Notification.objects.get(user=self.bob)
        self.assertEqual(notification.type, 'system')
        self.assertEqual(notification.related_item_id, str(project.pk))

    def test_remove_member(self):
        project = services.create_project('Website', self.alice)
        services.add_member(project.pk, self.bob.pk, self.alice)

        with self.assertRaises(Forbidden):
            services.remove_member(project.pk, self.bob.pk, self.bob)
        with self.assertRaises(BadRequest):
            services.remove_member(project.pk, self.alice.pk, self.alice)
        with self.assertRaises(NotFound):
            services.remove_member(project.pk, self.carol.pk, self.alice)

        services.remove_member(project.pk, self.bob.pk, self.alice)
        self.assertFalse(project.has_member(self.bob))

    def test_update_and_delete_are_owner_only(self):
        project = services.create_project('Website', self.alice)
        services.add_member(project.pk, self.bob.pk, self.alice)

        with self.assertRaises(Forbidden):
            services.update_project(project.pk, self.bob, name='Blog')
        with self.assertRaises(Forbidden):
            services.delete_project(project.pk, self.bob)

        services.update_project(project.pk, self.alice, name='Blog', color='#000000')
        project.refresh_from_db()
        self.assertEqual(project.name, 'Blog')
        self.assertEqual(project.color, '#000000')

        services.delete_project(project.pk, self.alice)
        self.assertFalse(Project.objects.filter(pk=project.pk).exists())

    def test_list_projects_for_user(self):
        own = services.create_project('Website', self.alice)
        shared = services.create_project('Mobile', self.bob)
        services.create_project('Internal', self.carol)
        services.add_member(shared.pk, self.alice.pk, self.bob)

        projects = set(services.list_projects_for_user(self.alice))
        self.assertEqual(projects, {own, shared})

    def test_project_survives_owner_account_deletion(self):
        project = services.create_project('Website', self.alice)
        services.add_member(project.pk, self.bob.pk, self.alice)
        delete_account(self.alice)

        project.refresh_from_db()
        self.assertIsNone(project.owner)
        self.assertEqual(list(project.members.all()), [self.bob])

    def test_list_project_tasks(self):
        project = services.create_project('Website', self.alice)
        Task.objects.create(title='Landing page', project=project, created_by=self.alice, assignee=self.alice)
        Task.objects.create(title='Elsewhere', created_by=self.alice)

        tasks = services.list_project_tasks(project.pk, self.alice)
        self.assertEqual([t.title for t in tasks], ['Landing page'])
        with self.assertRaises(Forbidden):
            services.list_project_tasks(project.pk, self.bob)


class ProjectAPITest(APITestCase):
    def setUp(self):
        self.alice = User.objects.create_user(email='alice@example.com', name='Alice', password='testpass123')
        self.carol = User.objects.create_user(email='carol@example.com', name='Carol', password='testpass123')
        self.client.force_authenticate(user=self.alice)

    def test_create_project(self):
        response = self.client.post('/api/projects/', {'name': 'Website', 'description': 'Marketing site'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['color'], DEFAULT_PROJECT_COLOR)
        self.assertEqual(response.data['owner']['id'], self.alice.pk)
        self.assertEqual([m['id'] for m in response.data['members']], [self.alice.pk])

    def test_create_project_rejects_bad_color(self):
        response = self.client.post('/api/projects/', {'name': 'Website', 'color': 'blue'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_member_management(self):
        project = services.create_project('Website', self.alice)

        response = self.client.post(f'/api/projects/{project.pk}/members/', {'user_id': self.carol.pk}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        response = self.client.post(f'/api/projects/{project.pk}/members/', {'user_id': self.carol.pk}, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

        response = self.client.delete(f'/api/projects/{project.pk}/members/{self.carol.pk}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_non_member_cannot_read_project(self):
        project = services.create_project('Website', self.carol)
        response = self.client.get(f'/api/projects/{project.pk}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        response = self.client.get(f'/api/projects/{project.pk}/tasks/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_project_tasks_endpoint(self):
        project = services.create_project('Website', self.alice)
        Task.objects.create(title='Landing page', project=project, created_by=self.alice, assignee=self.alice)
        response = self.client.get(f'/api/projects/{project.pk}/tasks/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data[0]['project'], {'id': project.pk, 'name': 'Website', 'color': DEFAULT_PROJECT_COLOR})
