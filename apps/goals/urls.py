from django.urls import path
from . import views

urlpatterns = [
    path('', views.goal_list_view, name='goal_list'),
    path('new/', views.goal_create_view, name='goal_create'),
    path('tree/', views.goal_tree_view, name='goal_tree'),
    path('insights/', views.goal_insights_view, name='goal_insights'),
    path('statistics/', views.goal_statistics_view, name='goal_statistics'),
    path('<int:pk>/', views.goal_detail_view, name='goal_detail'),
    path('<int:pk>/edit/', views.goal_edit_view, name='goal_edit'),
    path('<int:pk>/sub-goals/new/', views.sub_goal_create_view, name='sub_goal_create'),
    path('<int:pk>/progress/', views.goal_progress_view, name='goal_progress'),
    path('<int:pk>/progress/add/', views.goal_add_progress_view, name='goal_add_progress'),
    path('<int:pk>/complete/', views.goal_complete_view, name='goal_complete'),
    path('<int:pk>/abandon/', views.goal_abandon_view, name='goal_abandon'),
    path('<int:pk>/reactivate/', views.goal_reactivate_view, name='goal_reactivate'),
    path('<int:pk>/archive/', views.goal_archive_view, name='goal_archive'),
    path('<int:pk>/delete/', views.goal_delete_view, name='goal_delete'),
]
