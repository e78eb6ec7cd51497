from rest_framework import generics, permissions

from .serializers import AgentDetailSerializer


class MeView(generics.RetrieveUpdateAPIView):
    serializer_class = AgentDetailSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_object(self):
        return self.request.user
