"""
Uma senha em aberto (CREATED, CALLED, IN_SERVICE) por cidadão.
"""

from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ('tickets', '0001_initial'),
    ]

    operations = [
        migrations.AddConstraint(
            model_name='ticketmodel',
            constraint=models.UniqueConstraint(
                fields=['citizen_ref'],
                condition=models.Q(status__in=['CREATED', 'CALLED', 'IN_SERVICE']),
                name='ticket_one_open_per_citizen',
            ),
        ),
    ]
