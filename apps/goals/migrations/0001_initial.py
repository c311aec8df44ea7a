import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
    ]

    operations = [
        migrations.CreateModel(
            name='Goal',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('title', models.CharField(max_length=200)),
                ('description', models.TextField(blank=True)),
                ('level', models.PositiveIntegerField(default=0, help_text='Głębokość w drzewie (0 = cel główny)')),
                ('is_multi_level', models.BooleanField(default=False)),
                ('category', models.CharField(choices=[('career', 'Career'), ('finance', 'Finance'), ('health', 'Health'), ('learning', 'Learning'), ('relationship', 'Relationship'), ('lifestyle', 'Lifestyle'), ('hobby', 'Hobby'), ('other', 'Other')], default='other', max_length=20)),
                ('goal_type', models.CharField(blank=True, max_length=50)),
                ('start_date', models.DateField(blank=True, default=django.utils.timezone.localdate)),
                ('end_date', models.DateField(blank=True, null=True)),
                ('progress_type', models.CharField(choices=[('numeric', 'Numeric'), ('percentage', 'Percentage')], default='percentage', max_length=20)),
                ('target_value', models.FloatField(blank=True, null=True)),
                ('current_value', models.FloatField(default=0)),
                ('unit', models.CharField(blank=True, max_length=20)),
                ('status', models.CharField(choices=[('active', 'Active'), ('completed', 'Completed'), ('abandoned', 'Abandoned'), ('archived', 'Archived')], default='active', max_length=20)),
                ('abandon_reason', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('updated_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('completed_at', models.DateTimeField(blank=True, null=True)),
                ('abandoned_at', models.DateTimeField(blank=True, null=True)),
                ('parent', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name='children', to='goals.goal')),
            ],
            options={
                'ordering': ['level', 'end_date', 'id'],
            },
        ),
        migrations.CreateModel(
            name='GoalRecord',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('record_type', models.CharField(choices=[('start', 'Start'), ('progress', 'Progress'), ('complete', 'Complete'), ('abandon', 'Abandon'), ('reactivate', 'Reactivate'), ('archive', 'Archive')], max_length=20)),
                ('title', models.CharField(blank=True, max_length=200)),
                ('content', models.TextField(blank=True)),
                ('progress_value', models.FloatField(blank=True, null=True)),
                ('previous_value', models.FloatField(blank=True, null=True)),
                ('record_date', models.DateField(default=django.utils.timezone.localdate)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('goal', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='records', to='goals.goal')),
            ],
            options={
                'ordering': ['-created_at', '-id'],
            },
        ),
        migrations.AddIndex(
            model_name='goal',
            index=models.Index(fields=['parent', 'status'], name='goal_parent_status_idx'),
        ),
    ]
