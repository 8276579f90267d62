# --- Feedback Templates ---
class FeedbackGenerator:
    @staticmethod
    def body_not_visible():
        return "Make sure your full body is visible"

    @staticmethod
    def detecting():
        return "Hold still, detecting..."

    @staticmethod
    def stabilizing(remaining_ms: float):
        return f"Stabilizing... ({max(remaining_ms, 0.0) / 1000:.1f}s)"

    @staticmethod
    def side_switched():
        return "Switched tracking side. Hold."

    @staticmethod
    def tracking_stable():
        return "Tracking stable. Begin."

    @staticmethod
    def hip_not_visible():
        return "Hip not visible"

    @staticmethod
    def jitter_detected():
        return "Jitter detected. Hold."

    @staticmethod
    def form_unreadable():
        return "Could not read form. Adjust your position."
