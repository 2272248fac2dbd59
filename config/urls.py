from django.urls import include, path

urlpatterns = [
    path('api/', include('blooddoc.urls')),
    path('api/', include('assist.urls')),
]
