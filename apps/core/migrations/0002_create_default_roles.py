# Generated migration to create default roles
from django.db import migrations

def create_default_roles(apps, schema_editor):
    Role = apps.get_model('core', 'Role')

    default_roles = [
        ('admin', 'Administrator - Purchases, promo codes, course content and settings'),
        ('learner', 'Learner - Buys courses, takes quizzes and the certificate exam'),
    ]

    for name, description in default_roles:
        Role.objects.get_or_create(name=name, defaults={'description': description})


def reverse_roles(apps, schema_editor):
    pass  # Don't delete roles on reverse


class Migration(migrations.Migration):

    dependencies = [
        ('core', '0001_initial'),
    ]

    operations = [
        migrations.RunPython(create_default_roles, reverse_roles),
    ]
