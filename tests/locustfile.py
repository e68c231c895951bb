"""
Load testing with Locust.

Run with:
    locust -f tests/locustfile.py --host=http://localhost:8000

Then open http://localhost:8089 to start the test. Many users toggling
follows and liking the same reviews is what exercises the counter and
conflict-tolerant insert paths.
"""

import random
import string
from locust import HttpUser, task, between

PASSWORD = "testpassword123"


def random_string(length=10):
    return ''.join(random.choices(string.ascii_lowercase, k=length))


class CookUser(HttpUser):
    """Simulates a user who cooks, reviews and follows."""

    wait_time = between(1, 3)

    def on_start(self):
        """Called when a user starts. Register and keep basic-auth credentials."""
        self.name = f"cook_{random_string(8)}"
        response = self.client.post(
            "/auth/register",
            json={"name": self.name, "password": PASSWORD}
        )
        if response.status_code == 201:
            self.user_id = response.json()["id"]
            self.auth = (str(self.user_id), PASSWORD)
        else:
            self.user_id = None
            self.auth = None

        self.recipe_ids = []
        self.review_ids = []

    @task(5)
    def create_recipe(self):
        """Publish a recipe."""
        response = self.client.post(
            "/recipes",
            json={
                "name": f"Load test dish {random_string(6)}",
                "cook_time": "PT20M",
                "ingredients": [random_string(5) for _ in range(3)],
            },
            auth=self.auth,
        )
        if response.status_code == 201:
            self.recipe_ids.append(response.json()["id"])

    @task(8)
    def review_recipe(self):
        """Review one of the first few recipes, which every user shares."""
        recipe_id = random.randint(1, 20)
        response = self.client.post(
            f"/recipes/{recipe_id}/reviews",
            json={"rating": random.randint(1, 5), "content": random_string(30)},
            auth=self.auth,
            name="/recipes/[id]/reviews",
        )
        if response.status_code == 201:
            self.review_ids.append(response.json()["id"])

    @task(3)
    def delete_review(self):
        """Delete one of this user's reviews."""
        if self.review_ids:
            review_id = self.review_ids.pop()
            response = self.client.get(f"/reviews/{review_id}", name="/reviews/[id]")
            if response.status_code == 200:
                recipe_id = response.json()["recipe_id"]
                self.client.delete(
                    f"/recipes/{recipe_id}/reviews/{review_id}",
                    auth=self.auth,
                    name="/recipes/[id]/reviews/[id]",
                )

    @task(10)
    def like_review(self):
        """Like a random review; duplicates and self-likes are expected."""
        review_id = random.randint(1, 200)
        with self.client.post(
            f"/reviews/{review_id}/like", auth=self.auth, name="/reviews/[id]/like", catch_response=True
        ) as response:
            if response.status_code in (200, 403, 404):
                response.success()

    @task(6)
    def toggle_follow(self):
        """Toggle a follow on one of the first hundred users."""
        user_id = random.randint(1, 100)
        with self.client.post(
            f"/users/{user_id}/follow", auth=self.auth, name="/users/[id]/follow", catch_response=True
        ) as response:
            if response.status_code in (200, 400, 404):
                response.success()

    @task(4)
    def get_recipe(self):
        """Read a recipe and its rating summary."""
        recipe_id = random.randint(1, 20)
        with self.client.get(f"/recipes/{recipe_id}", name="/recipes/[id]", catch_response=True) as response:
            if response.status_code in (200, 404):
                response.success()


class ReaderUser(HttpUser):
    """User that only reads profiles and recipes."""

    wait_time = between(0.5, 2)

    @task(5)
    def get_recipe(self):
        recipe_id = random.randint(1, 20)
        with self.client.get(f"/recipes/{recipe_id}", name="/recipes/[id]", catch_response=True) as response:
            if response.status_code in (200, 404):
                response.success()

    @task(2)
    def get_profile(self):
        user_id = random.randint(1, 100)
        with self.client.get(f"/users/{user_id}", name="/users/[id]", catch_response=True) as response:
            if response.status_code in (200, 404):
                response.success()
