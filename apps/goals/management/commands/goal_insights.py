from datetime import date
from django.core.management.base import BaseCommand, CommandError
from apps.goals.adapters.orm_repositories import DjangoGoalRepository
from apps.goals.application.use_cases import GoalReportService


class Command(BaseCommand):
    help = 'Wypisuje podsumowanie celów: statystyki, terminy i serie ukończeń'

    def add_arguments(self, parser):
        parser.add_argument('--today', help='Data odniesienia (YYYY-MM-DD), domyślnie dzisiaj')

    def handle(self, *args, **options):
        today = None
        if options.get('today'):
            try:
                today = date.fromisoformat(options['today'])
            except ValueError:
                raise CommandError(f"Invalid date: {options['today']} (expected YYYY-MM-DD)")

        report = GoalReportService(DjangoGoalRepository()).get_report(today)
        insights, stats = report.insights, report.statistics

        self.stdout.write(self.style.SUCCESS(f'Cele na dzień {report.today.isoformat()}'))
        self.stdout.write(
            f"Total: {insights.total_goals} | Active: {insights.active_goals} | "
            f"Completed: {insights.completed_goals} | Abandoned: {insights.abandoned_goals}"
        )
        self.stdout.write(f"Completion rate: {insights.completion_rate:.0%}")
        self.stdout.write(f"Average active progress: {stats.total_progress:.0%}")
        self.stdout.write(f"Average completion days: {insights.average_completion_days}")
        if insights.most_active_category:
            self.stdout.write(f"Most active category: {insights.most_active_category.value}")

        streak = insights.streak_data
        self.stdout.write(f"Streak: {streak.current_streak} (longest {streak.longest_streak})")

        if insights.overdue_goals:
            self.stdout.write(self.style.WARNING(f'Przeterminowane ({len(insights.overdue_goals)}):'))
            for g in insights.overdue_goals:
                self.stdout.write(f"- {g.title} ({g.end_date})")
        if insights.upcoming_deadlines:
            self.stdout.write(f'Nadchodzące terminy ({len(insights.upcoming_deadlines)}):')
            for g in insights.upcoming_deadlines:
                self.stdout.write(f"- {g.title} ({g.end_date})")
