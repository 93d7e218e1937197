from django.core.management.base import BaseCommand
from django.contrib.auth import get_user_model
from django.utils import timezone
from apps.tasks.lifecycle import apply_status
from apps.tasks.models import Note, Task, TaskPriority, TaskStatus
from apps.users.models import Role
import random
from datetime import timedelta

User = get_user_model()

FIRST_NAMES = [
    'Alice', 'Bob', 'Charlie', 'Diana', 'Eve', 'Frank', 'Grace', 'Henry',
    'Ivy', 'Jack', 'Kate', 'Liam', 'Mia', 'Noah', 'Olivia', 'Peter',
    'Quinn', 'Ryan', 'Sara', 'Tom', 'Uma', 'Victor', 'Wendy', 'Zoe',
]

LAST_NAMES = [
    'Smith', 'Johnson', 'Williams', 'Brown', 'Jones', 'Garcia', 'Miller',
    'Davis', 'Martinez', 'Lopez', 'Wilson', 'Anderson', 'Thomas', 'Moore',
]

TAGS = [
    'frontend', 'backend', 'database', 'api', 'ui', 'mobile', 'security',
    'performance', 'testing', 'docs', 'bug', 'feature',
]


class Command(BaseCommand):
    help = 'Seed the database with sample users and tasks'

    def add_arguments(self, parser):
        parser.add_argument(
            '--users',
            type=int,
            default=10,
            help='Number of regular users to create'
        )
        parser.add_argument(
            '--tasks',
            type=int,
            default=50,
            help='Number of tasks to create'
        )
        parser.add_argument(
            '--admin-password',
            default='admin123',
            help='Password for the admin account'
        )

    def handle(self, *args, **options):
        self.stdout.write('Seeding database...')

        admin = self.create_admin(options['admin_password'])
        users = self.create_users(options['users'])
        tasks = self.create_tasks([admin] + users, options['tasks'])

        self.stdout.write(
            self.style.SUCCESS(
                f'Seed data created.\n'
                f'Users: {len(users) + 1}\n'
                f'Tasks: {len(tasks)}\n\n'
                f'Admin: {admin.email}\n'
                f'Regular users: [username]@example.com / password123'
            )
        )

    def create_admin(self, password):
        admin, created = User.objects.get_or_create(
            username='admin',
            defaults={
                'email': 'admin@example.com',
                'first_name': 'Admin',
                'last_name': 'User',
                'role': Role.ADMIN,
            }
        )
        if created:
            admin.set_password(password)
            admin.save()
            self.stdout.write(f'Created admin user: {admin.username}')
        return admin

    def create_users(self, num_users):
        self.stdout.write('Creating users...')
        users = []

        for i in range(num_users):
            first_name = random.choice(FIRST_NAMES)
            last_name = random.choice(LAST_NAMES)
            username = f"{first_name.lower()}{last_name.lower()}{i}"

            user, created = User.objects.get_or_create(
                username=username,
                defaults={
                    'email': f"{username}@example.com",
                    'first_name': first_name,
                    'last_name': last_name,
                }
            )
            if created:
                user.set_password('password123')
                user.save()

            users.append(user)

        return users

    def create_tasks(self, users, num_tasks):
        self.stdout.write('Creating tasks...')
        now = timezone.now()
        tasks = []

        for i in range(num_tasks):
            creator = random.choice(users)
            assignee = random.choice(users)
            title = (
                f"Task {i + 1}: "
                f"{random.choice(['Implement', 'Fix', 'Update', 'Create', 'Optimize'])} "
                f"{random.choice(['feature', 'bug', 'component', 'service', 'endpoint'])}"
            )

            task = Task(
                title=title,
                description=f"Description for {title}",
                priority=random.choice(TaskPriority.values),
                due_date=now + timedelta(days=random.randint(1, 30)),
                tags=random.sample(TAGS, random.randint(0, 3)),
                created_by=creator,
                assigned_to=assignee,
            )
            apply_status(task, random.choice(TaskStatus.values), now)
            task.save()

            if random.random() > 0.6:
                Note.objects.create(
                    task=task,
                    author=random.choice([creator, assignee]),
                    text=f"Progress update on {title.lower()}",
                )

            tasks.append(task)

        return tasks
