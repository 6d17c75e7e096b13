from __future__ import annotations

import random

from locust import HttpUser, between, task

QUESTIONS = [
    "What are my sales in the last 7 days?",
    "Calculate the RoAS (Return on Ad Spend).",
    "Which product had the highest CPC (Cost Per Click)?",
    "Show daily revenue for each product.",
]


class AskUser(HttpUser):
    wait_time = between(1, 5)

    @task
    def ask_question(self) -> None:
        self.client.post("/api/ask", json={"question": random.choice(QUESTIONS)})
