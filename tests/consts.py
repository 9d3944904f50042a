TEST_BUCKET_NAME = "test-file-store"
TEST_MAX_UPLOAD_BYTES = 1024
