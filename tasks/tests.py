from datetime import timedelta

from django.test import TestCase
from django.contrib.auth import get_user_model
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from notifications.models import Notification
from projects.services import create_project
from taskflow.exceptions import Forbidden, NotFound
from . import services
from .models import Task, Comment

User = get_user_model()


class TaskModelTest(TestCase):
    def setUp(self):
        self.user = User.objects.create_user(email='test@example.com', name='John', password='testpass123')

    def test_task_default_values(self):
        task = Task.objects.create(title='Review code', created_by=self.user)
        self.assertEqual(task.status, 'todo')
        self.assertEqual(task.priority, 'medium')
        self.assertEqual(task.tags, [])
        self.assertEqual(task.description, '')
        self.assertIsNone(task.project)

    def test_updated_at_refreshes_on_save(self):
        task = Task.objects.create(title='Review code', created_by=self.user)
        first = task.updated_at
        task.status = 'completed'
        task.save()
        self.assertGreaterEqual(task.updated_at, first)


class TaskServiceTest(TestCase):
    def setUp(self):
        self.alice = User.objects.create_user(email='alice@example.com', name='Alice', password='testpass123')
        self.bob = User.objects.create_user(email='bob@example.com', name='Bob', password='testpass123')
        self.dave = User.objects.create_user(email='dave@example.com', name='Dave', password='testpass123')

    def test_default_assignee_scenario(self):
        task = services.create_task(self.alice, title='Write docs')
        self.assertEqual(task.assignee, self.alice)
        self.assertEqual(task.created_by, self.alice)
        with self.assertRaises(Forbidden):
            services.update_task(task.pk, self.dave, status='completed')

    def test_self_assignment_sends_no_notification(self):
        services.create_task(self.alice, title='Write docs')
        self.assertFalse(Notification.objects.exists())

    def test_assigning_someone_else_notifies_them(self):
        task = services.create_task(self.alice, title='Write docs', assignee=self.bob)
        notification = Notification.objects.get(user=self.bob)
        self.assertEqual(notification.type, 'task')
        self.assertEqual(notification.related_item_id, str(task.pk))

    def test_creator_and_assignee_can_read_and_update(self):
        task = services.create_task(self.alice, title='Write docs', assignee=self.bob)
        self.assertEqual(services.get_task(task.pk, self.alice), task)
        self.assertEqual(services.get_task(task.pk, self.bob), task)
        with self.assertRaises(Forbidden):
            services.get_task(task.pk, self.dave)

        services.update_task(task.pk, self.bob, status='in-progress')
        task.refresh_from_db()
        self.assertEqual(task.status, 'in-progress')

    def test_partial_update_keeps_omitted_fields(self):
        due = timezone.now() + timedelta(days=3)
        task = services.create_task(
            self.alice, title='Write docs', description='API docs',
            priority='high', due_date=due, tags=['docs']
        )
        services.update_task(task.pk, self.alice, status='blocked')
        task.refresh_from_db()
        self.assertEqual(task.title, 'Write docs')
        self.assertEqual(task.description, 'API docs')
        self.assertEqual(task.priority, 'high')
        self.assertEqual(task.due_date, due)
        self.assertEqual(task.tags, ['docs'])
        self.assertEqual(task.status, 'blocked')

    def test_reassignment_notifies_new_assignee(self):
        task = services.create_task(self.alice, title='Write docs')
        services.update_task(task.pk, self.alice, assignee=self.bob)
        self.assertEqual(Notification.objects.filter(user=self.bob, type='task').count(), 1)

    def test_only_creator_can_delete(self):
        task = services.create_task(self.alice, title='Write docs', assignee=self.bob)
        with self.assertRaises(Forbidden):
            services.delete_task(task.pk, self.bob)
        with self.assertRaises(Forbidden):
            services.delete_task(task.pk, self.dave)
        services.delete_task(task.pk, self.alice)
        self.assertFalse(Task.objects.filter(pk=task.pk).exists())

    def test_missing_task(self):
        with self.assertRaises(NotFound):
            services.get_task(9999, self.alice)
        with self.assertRaises(NotFound):
            services.delete_task(9999, self.alice)

    def test_list_tasks_for_user(self):
        created = services.create_task(self.alice, title='Mine')
        assigned = services.create_task(self.bob, title='For Alice', assignee=self.alice)
        services.create_task(self.bob, title='Not Alice')
        self.assertEqual(set(services.list_tasks_for_user(self.alice)), {created, assigned})

    def test_comments_oldest_first(self):
        task = services.create_task(self.alice, title='Write docs')
        first = Comment.objects.create(task=task, user=self.alice, content='First')
        second = Comment.objects.create(task=task, user=self.bob, content='Second')
        second.mentions.add(self.alice)

        self.assertEqual(list(services.list_comments_for_task(task.pk)), [first, second])
        with self.assertRaises(NotFound):
            services.list_comments_for_task(9999)


class TaskAPITest(APITestCase):
    def setUp(self):
        self.alice = User.objects.create_user(email='alice@example.com', name='Alice', password='testpass123')
        self.bob = User.objects.create_user(email='bob@example.com', name='Bob', password='testpass123')
        self.client.force_authenticate(user=self.alice)

    def test_create_task_defaults_assignee(self):
        response = self.client.post('/api/tasks/', {'title': 'Write docs'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['assignee']['id'], self.alice.pk)
        self.assertEqual(response.data['created_by']['id'], self.alice.pk)
        self.assertEqual(response.data['status'], 'todo')

    def test_create_task_with_project_and_assignee(self):
        project = create_project('Website', self.alice)
        data = {
            'title': 'Landing page',
            'priority': 'urgent',
            'assignee_id': self.bob.pk,
            'project_id': project.pk,
            'tags': ['frontend', 'design'],
        }
        response = self.client.post('/api/tasks/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['assignee']['id'], self.bob.pk)
        self.assertEqual(response.data['project']['name'], 'Website')
        self.assertEqual(response.data['tags'], ['frontend', 'design'])

    def test_create_task_rejects_unknown_status(self):
        response = self.client.post('/api/tasks/', {'title': 'Write docs', 'status': 'done'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_filter_and_order(self):
        now = timezone.now()
        services.create_task(self.alice, title='Low', priority='low', due_date=now + timedelta(days=1))
        services.create_task(self.alice, title='Urgent', priority='urgent', due_date=now + timedelta(days=3))
        services.create_task(self.alice, title='Done', priority='low', status='completed', due_date=now + timedelta(days=2))

        response = self.client.get('/api/tasks/', {'priority': 'low'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual({t['title'] for t in response.data}, {'Low', 'Done'})

        response = self.client.get('/api/tasks/', {'status': 'completed'})
        self.assertEqual([t['title'] for t in response.data], ['Done'])

        response = self.client.get('/api/tasks/', {'ordering': 'due_date'})
        self.assertEqual([t['title'] for t in response.data], ['Low', 'Done', 'Urgent'])

    def test_order_by_priority_follows_urgency(self):
        for priority in ('urgent', 'low', 'high', 'medium'):
            services.create_task(self.alice, title=priority.title(), priority=priority)

        response = self.client.get('/api/tasks/', {'ordering': 'priority'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([t['priority'] for t in response.data], ['low', 'medium', 'high', 'urgent'])

        response = self.client.get('/api/tasks/', {'ordering': '-priority'})
        self.assertEqual([t['priority'] for t in response.data], ['urgent', 'high', 'medium', 'low'])

    def test_update_task(self):
        task = services.create_task(self.alice, title='Write docs')
        response = self.client.put(f'/api/tasks/{task.pk}/', {'status': 'completed'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'completed')
        self.assertEqual(response.data['title'], 'Write docs')

    def test_assignee_cannot_delete(self):
        task = services.create_task(self.bob, title='Write docs', assignee=self.alice)
        response = self.client.delete(f'/api/tasks/{task.pk}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_creator_deletes(self):
        task = services.create_task(self.alice, title='Write docs')
        response = self.client.delete(f'/api/tasks/{task.pk}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], 'Task deleted successfully')

    def test_unrelated_user_gets_forbidden(self):
        task = services.create_task(self.bob, title='Private')
        response = self.client.get(f'/api/tasks/{task.pk}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_comments_for_any_authenticated_user(self):
        task = services.create_task(self.bob, title='Private')
        Comment.objects.create(task=task, user=self.bob, content='Looks good')

        response = self.client.get(f'/api/comments/task/{task.pk}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data[0]['content'], 'Looks good')
        self.assertEqual(response.data[0]['user']['id'], self.bob.pk)

        response = self.client.get(f'/api/tasks/{task.pk}/comments/')
        self.assertEqual(len(response.data), 1)

        response = self.client.get('/api/comments/task/9999/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
