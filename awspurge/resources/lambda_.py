from awspurge.core.retry import retry_delete


class LambdaFunction:
    def __init__(self, client, function):
        self.client = client
        self.name = function['FunctionName']
        self.runtime = function.get('Runtime', '')
        self.last_modified = function.get('LastModified', '')

    def __str__(self):
        return self.name

    def properties(self):
        return {
            'Name': self.name,
            'Runtime': self.runtime,
            'LastModified': self.last_modified,
        }

    def remove(self):
        retry_delete(
            lambda: self.client.delete_function(FunctionName=self.name),
            f"Delete Lambda function {self.name}"
        )


def list_functions(session):
    client = session.client('lambda')
    functions = []
    for page in client.get_paginator('list_functions').paginate():
        functions.extend(LambdaFunction(client, f) for f in page['Functions'])
    return functions
