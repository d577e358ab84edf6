from django.urls import path

from .views import HomeView, PostsView

urlpatterns = [
    path('', HomeView.as_view(), name='home'),
    path('posts', PostsView.as_view(), name='posts'),
]
