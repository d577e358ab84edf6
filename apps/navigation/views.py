"""
Site pages that render the navigation header.
"""
from django.views.generic import TemplateView


class HomeView(TemplateView):
    template_name = 'navigation/home.html'


class PostsView(TemplateView):
    template_name = 'navigation/posts.html'
