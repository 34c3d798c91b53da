import dataclasses
from pathlib import Path

import pytest

# A manifest repository with a packaged chart in it. The chart's template is
# not valid YAML on purpose: parsing it would fail the load.
MANIFEST_FILES = {
    "garbage": "This should just be ignored, since it's not YAML\n",
    "README.md": "# Manifests\n",
    "helloworld-deploy.yaml": """\
apiVersion: apps/v1
kind: Deployment
metadata:
  name: helloworld
  namespace: demo
spec:
  template:
    spec:
      containers:
      - name: greeter
        image: quay.io/example/helloworld:master-a000001
      - name: sidecar
        image: quay.io/example/sidecar:master-a000002
""",
    "locked-service-deploy.yaml": """\
apiVersion: apps/v1
kind: Deployment
metadata:
  name: locked-service
  namespace: demo
spec:
  template:
    spec:
      containers:
      - name: locked-service
        image: quay.io/example/locked-service:1
""",
    "multi.yaml": """\
# Service and settings for helloworld
---
apiVersion: v1
kind: Service
metadata:
  name: helloworld
  namespace: demo
spec:
  ports:
  - port: 80
---
apiVersion: v1
kind: ConfigMap
metadata:
  name: settings
  namespace: demo
data:
  greeting.txt: |
    hello
    ---
    world
---
""",
    "namespace.yml": """\
apiVersion: v1
kind: Namespace
metadata:
  name: demo
""",
    "test/test-service-deploy.yaml": """\
apiVersion: apps/v1
kind: Deployment
metadata:
  name: test-service
  namespace: test
spec:
  template:
    spec:
      containers:
      - name: test-service
        image: quay.io/example/test-service:1
""",
    "cron/nightly.yaml": """\
apiVersion: batch/v1
kind: CronJob
metadata:
  name: nightly
  namespace: demo
spec:
  schedule: "0 3 * * *"
  jobTemplate:
    spec:
      template:
        spec:
          containers:
          - name: report
            image: quay.io/example/report:2
""",
    "charts/nginx/Chart.yaml": """\
apiVersion: v1
name: nginx
version: 0.1.0
""",
    "charts/nginx/values.yaml": """\
replicaCount: 1
image:
  repository: nginx
  tag: stable
""",
    "charts/nginx/templates/deployment.yaml": """\
apiVersion: apps/v1
kind: Deployment
metadata:
  name: {{ template "nginx.fullname" . }}
  labels:
{{ include "nginx.labels" . | indent 4 }}
""",
    "charts/nginx/templates/_helpers.tpl": '{{- define "nginx.fullname" -}}nginx{{- end -}}\n',
    "charts/nginx/charts/redis/Chart.yaml": "apiVersion: v1\nname: redis\nversion: 1.0.0\n",
    "charts/nginx/charts/redis/templates/service.yaml": "kind: Service\nmetadata:\n  name: {{ .Release.Name }}\n",
}

EXPECTED_IDS = {
    "helloworld-deploy.yaml": {"demo:deployment/helloworld"},
    "locked-service-deploy.yaml": {"demo:deployment/locked-service"},
    "multi.yaml": {"demo:service/helloworld", "demo:configmap/settings"},
    "namespace.yml": {"<cluster>:namespace/demo"},
    "test/test-service-deploy.yaml": {"test:deployment/test-service"},
    "cron/nightly.yaml": {"demo:cronjob/nightly"},
}


def write_files(root: Path, files: dict):
    for rel_path, content in files.items():
        path = root / rel_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)


@pytest.fixture
def manifest_tree(tmp_path) -> Path:
    root = tmp_path / "repo"
    root.mkdir()
    write_files(root, MANIFEST_FILES)
    return root


@pytest.fixture
def expected_ids():
    return {path: set(ids) for path, ids in EXPECTED_IDS.items()}


@pytest.fixture
def strip_payload():
    """Returns a copy of a resource without its raw bytes, for comparisons."""
    def _strip(resource):
        return dataclasses.replace(resource, raw=b"")
    return _strip


@pytest.fixture
def write_manifests(manifest_tree):
    """Adds files to the manifest tree."""
    def _write(files: dict):
        write_files(manifest_tree, files)
    return _write
