from django.urls import path

from works.views.work_link_views import work_links

app_name = "works"

urlpatterns = [
    path("<int:work_id>/links/", work_links, name="work-links"),
]
