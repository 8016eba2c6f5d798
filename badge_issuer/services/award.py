"""The ``award.html`` page published next to the issuer.

Recipients open it, enter the class and uid of their badge, and the
page hands the hosted assertion URL to the Open Badges backpack.
"""

from __future__ import annotations

REPO_PATH_TOKEN = "REPO_PATH"

AWARD_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <title>Claim your badge</title>
    <script src="https://backpack.openbadges.org/issuer.js"></script>
</head>
<body>
    <form id="claim">
        <label>Class <input id="class-name" name="class" required></label>
        <label>Badge id <input id="badge-uid" name="uid" required></label>
        <button type="submit">Add to my backpack</button>
    </form>
    <script>
        document.getElementById('claim').addEventListener('submit', function (e) {
            e.preventDefault();
            var klass = document.getElementById('class-name').value.trim(),
                uid = document.getElementById('badge-uid').value.trim();

            OpenBadges.issue(['http://REPO_PATH/' + klass + '/' + uid + '.json'], function (errors, successes) {
                if (errors.length) {
                    alert('The badge could not be added: ' + errors[0].reason);
                }
            });
        });
    </script>
</body>
</html>
"""


def render_award(template: str, repo_path: str) -> str:
    """Return a copy of ``template`` with the repository path filled in."""
    return template.replace(REPO_PATH_TOKEN, repo_path)


def repo_pages_path(user: str, repo: str) -> str:
    return f"{user}.github.io/{repo}"
